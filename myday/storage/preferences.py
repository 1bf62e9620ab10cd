from datetime import datetime, timedelta
from typing import Dict, List, Optional

from .local import LocalStore

TASK_ORDER = "taskOrder"
DASHBOARD_LAYOUT = "dashboardLayout"
EVENT_ACKNOWLEDGMENTS = "eventAcknowledgments"
ONBOARDING_COMPLETE = "onboardingComplete"
DISMISSED_INSIGHTS = "dismissedInsights"

INSIGHT_DISMISSAL_DAYS = 7


class Preferences:
    """UI preferences kept in the local store; never migrated to the database."""

    def __init__(self, store: LocalStore):
        self.store = store

    def task_order(self) -> List[str]:
        return list(self.store.get_preference(TASK_ORDER, []))

    def set_task_order(self, task_ids: List[str]) -> None:
        self.store.set_preference(TASK_ORDER, list(dict.fromkeys(task_ids)))

    def dashboard_layout(self) -> str:
        return self.store.get_preference(DASHBOARD_LAYOUT, "uniform")

    def set_dashboard_layout(self, layout: str) -> None:
        self.store.set_preference(DASHBOARD_LAYOUT, layout)

    def event_acknowledgments(self) -> Dict[str, bool]:
        return dict(self.store.get_preference(EVENT_ACKNOWLEDGMENTS, {}))

    def acknowledge_event(self, event_id: str, day: str) -> None:
        acks = self.event_acknowledgments()
        acks[f"{event_id}-{day}"] = True
        self.store.set_preference(EVENT_ACKNOWLEDGMENTS, acks)

    def is_event_acknowledged(self, event_id: str, day: str) -> bool:
        return bool(self.event_acknowledgments().get(f"{event_id}-{day}"))

    def is_first_time_user(self) -> bool:
        return not self.store.get_preference(ONBOARDING_COMPLETE, False)

    def mark_onboarding_complete(self) -> None:
        self.store.set_preference(ONBOARDING_COMPLETE, True)

    def dismiss_insight(self, task_id: str, now: Optional[datetime] = None) -> None:
        dismissed = dict(self.store.get_preference(DISMISSED_INSIGHTS, {}))
        dismissed[task_id] = (now or datetime.utcnow()).isoformat()
        self.store.set_preference(DISMISSED_INSIGHTS, dismissed)

    def is_insight_dismissed(self, task_id: str, now: Optional[datetime] = None) -> bool:
        dismissed_at = self.store.get_preference(DISMISSED_INSIGHTS, {}).get(task_id)
        if not dismissed_at:
            return False
        elapsed = (now or datetime.utcnow()) - datetime.fromisoformat(dismissed_at)
        return elapsed < timedelta(days=INSIGHT_DISMISSAL_DAYS)
