import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from myday.core.logging import get_logger

logger = get_logger(__name__)

COLLECTIONS = ("tasks", "completions", "spillovers", "events", "journalEntries")


class LocalStore:
    """One JSON document per user, holding legacy collections and UI preferences."""

    def __init__(self, base_dir: str, user_id: str):
        self.base_dir = Path(base_dir)
        self.user_id = user_id
        self.path = self.base_dir / f"{user_id}.json"

    def _empty(self) -> Dict[str, Any]:
        document = {name: [] for name in COLLECTIONS}
        document["preferences"] = {}
        return document

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return self._empty()
        with self.path.open("r", encoding="utf-8") as fh:
            document = json.load(fh)
        for name in COLLECTIONS:
            document.setdefault(name, [])
        document.setdefault("preferences", {})
        return document

    def save(self, document: Dict[str, Any]) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.base_dir, prefix=f".{self.user_id}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        logger.debug(f"Local store written for user {self.user_id}")

    def collection(self, name: str) -> List[Dict[str, Any]]:
        return list(self.load()[name])

    def replace_collection(self, name: str, items: List[Dict[str, Any]]) -> None:
        document = self.load()
        document[name] = items
        self.save(document)

    def get_preference(self, key: str, default: Any = None) -> Any:
        return self.load()["preferences"].get(key, default)

    def set_preference(self, key: str, value: Any) -> None:
        document = self.load()
        document["preferences"][key] = value
        self.save(document)

    def has_data(self) -> bool:
        document = self.load()
        return any(document[name] for name in COLLECTIONS)
