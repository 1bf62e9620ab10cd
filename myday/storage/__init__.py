from .local import LocalStore
from .mapping import to_row, from_row, to_document, from_document

__all__ = ["LocalStore", "to_row", "from_row", "to_document", "from_document"]
