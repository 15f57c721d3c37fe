"""Date manipulation utilities"""

from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from ledgerly.domain.models import Frequency


def add_period(from_date: date, frequency: Frequency, anchor_day: Optional[int] = None) -> date:
    """
    Move a date forward by one payment period.

    Monthly steps land on `anchor_day` (the schedule's original day of month),
    clamped to the last day of shorter months, so Jan 31 -> Feb 29 -> Mar 31.
    """
    if frequency == Frequency.WEEKLY:
        return from_date + timedelta(weeks=1)
    if frequency == Frequency.BIWEEKLY:
        return from_date + timedelta(weeks=2)
    if frequency == Frequency.MONTHLY:
        return from_date + relativedelta(months=1, day=anchor_day or from_date.day)
    raise ValueError(f"Unsupported frequency: {frequency}")
