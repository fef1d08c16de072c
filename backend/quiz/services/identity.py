import logging
from typing import Dict, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from quiz import db
from quiz.models import Employee

logger = logging.getLogger(__name__)


class IdentityOracle:
    """Answers "is this a known employee" and "did they start in this period".

    Looks in the ``employee`` table first; identities the table does not
    know, or every identity when the table cannot be reached, are checked
    against the configured fallback directory. Read-only.
    """

    def __init__(self, fallback: Optional[Dict[str, str]] = None):
        self.fallback = {k.lower(): v for k, v in (fallback or {}).items()}

    def _lookup(self, identity: str) -> Optional[Employee]:
        try:
            return Employee.query.filter(func.lower(Employee.email) == identity.lower()).first()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.warning(f"[oracle] employee table unavailable, using fallback: {exc}")
            return None

    def exists(self, identity: Optional[str]) -> bool:
        if not identity:
            return False
        if self._lookup(identity) is not None:
            return True
        return identity.lower() in self.fallback

    def matches_period(self, identity: Optional[str], period: Optional[str]) -> bool:
        if not identity or not period:
            return False
        employee = self._lookup(identity)
        recorded = employee.arrival_month_year if employee else self.fallback.get(identity.lower())
        if recorded is None or recorded.lower() != period.lower():
            logger.info(f"[oracle] {identity} with period {period!r} not matched")
            return False
        return True
