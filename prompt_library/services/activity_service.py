"""
Activity log - append-only record of user and anonymous actions.

Logging is best effort: a failure to write an activity row is logged and
discarded, never raised into the operation that triggered it.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func

from prompt_library.database import Database
from prompt_library.models import UserActivity, ActivityAction

logger = logging.getLogger(__name__)

DEFAULT_TIMEFRAME = "7d"
DEFAULT_WINDOW = timedelta(days=7)
_TIMEFRAME_RE = re.compile(r"^(\d+)([hd])$")


@dataclass
class RequestMeta:
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def parse_timeframe(timeframe: Optional[str]) -> timedelta:
    """Turn "24h" / "7d" / "30d" style windows into a timedelta; anything else is 7 days."""
    match = _TIMEFRAME_RE.match((timeframe or "").strip())
    if not match:
        return DEFAULT_WINDOW
    amount, unit = int(match.group(1)), match.group(2)
    try:
        return timedelta(hours=amount) if unit == "h" else timedelta(days=amount)
    except OverflowError:
        return DEFAULT_WINDOW


def window_start(timeframe: Optional[str], now: Optional[datetime] = None) -> datetime:
    """Start of the window ending at now; windows reaching before year 1 fall back to 7 days."""
    now = now or datetime.utcnow()
    try:
        return now - parse_timeframe(timeframe)
    except OverflowError:
        return now - DEFAULT_WINDOW


class ActivityService:
    """Writes and reads activity records through its own short-lived sessions."""

    def __init__(self, database: Database):
        self.database = database

    def log_activity(
        self,
        action: ActivityAction,
        user_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        meta: Optional[RequestMeta] = None,
    ) -> bool:
        """
        Record an activity event.

        Returns:
            True if the row was written, False if logging failed
        """
        db = self.database.session()
        try:
            db.add(UserActivity(
                action=action,
                user_id=user_id,
                details=details,
                ip_address=meta.ip_address if meta else None,
                user_agent=meta.user_agent if meta else None,
            ))
            db.commit()
            return True
        except Exception as e:
            # Don't fail the main operation if activity logging fails
            logger.error(f"Activity logging failed for {action.value}: {e}")
            db.rollback()
            return False
        finally:
            db.close()

    def get_user_activities(self, user_id: str, limit: int = 50, offset: int = 0) -> List[UserActivity]:
        db = self.database.session()
        try:
            activities = (
                db.query(UserActivity)
                .filter(UserActivity.user_id == user_id)
                .order_by(UserActivity.created_at.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            db.expunge_all()
            return activities
        finally:
            db.close()

    def get_activity_stats(self, timeframe: Optional[str] = None) -> Dict[str, Any]:
        """Count activity events inside a relative window, grouped by action."""
        timeframe = timeframe or DEFAULT_TIMEFRAME
        since = window_start(timeframe)

        db = self.database.session()
        try:
            rows = (
                db.query(UserActivity.action, func.count(UserActivity.id))
                .filter(UserActivity.created_at >= since)
                .group_by(UserActivity.action)
                .all()
            )
        finally:
            db.close()

        breakdown = {action.value: count for action, count in rows}
        return {
            "timeframe": timeframe,
            "total": sum(breakdown.values()),
            "breakdown": breakdown,
        }

    # Common activity logging methods

    def log_prompt_view(self, prompt_id: str, user_id: Optional[str] = None, meta: Optional[RequestMeta] = None):
        self.log_activity(ActivityAction.PROMPT_VIEWED, user_id, {"promptId": prompt_id}, meta)

    def log_prompt_test(self, prompt_id: str, user_id: Optional[str] = None, meta: Optional[RequestMeta] = None):
        self.log_activity(ActivityAction.PROMPT_TESTED, user_id, {"promptId": prompt_id}, meta)

    def log_prompt_create(self, prompt_id: str, user_id: str, meta: Optional[RequestMeta] = None):
        self.log_activity(ActivityAction.PROMPT_CREATED, user_id, {"promptId": prompt_id}, meta)

    def log_prompt_edit(self, prompt_id: str, user_id: str, meta: Optional[RequestMeta] = None):
        self.log_activity(ActivityAction.PROMPT_EDITED, user_id, {"promptId": prompt_id}, meta)

    def log_prompt_delete(self, prompt_id: str, user_id: str, meta: Optional[RequestMeta] = None):
        self.log_activity(ActivityAction.PROMPT_DELETED, user_id, {"promptId": prompt_id}, meta)

    def log_review_add(self, prompt_id: str, review_id: str, user_id: str, meta: Optional[RequestMeta] = None):
        self.log_activity(ActivityAction.REVIEW_ADDED, user_id, {"promptId": prompt_id, "reviewId": review_id}, meta)

    def log_user_signup(self, user_id: str, provider: str, meta: Optional[RequestMeta] = None):
        self.log_activity(ActivityAction.USER_SIGNUP, user_id, {"provider": provider}, meta)

    def log_user_signin(self, user_id: str, provider: str, meta: Optional[RequestMeta] = None):
        self.log_activity(ActivityAction.USER_SIGNIN, user_id, {"provider": provider}, meta)
