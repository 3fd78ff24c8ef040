"""System clock adapter implementing ClockPort."""

from datetime import datetime, timezone

from loanbook.core.ports import ClockPort


class SystemClock(ClockPort):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
