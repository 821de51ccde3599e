"""
Module: bankfile_engines.schedule
Responsibility:
    Decide whether a bank accepts a submission "today": the current weekday
    must be one of the bank's working days and the current time must be
    strictly before the bank's cutoff time on the same calendar day.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  ``now`` is always passed
    in; this module never reads the process clock.

Invariants enforced:
    - ``can_accept_today == is_working_day and now < cutoff``.
    - ``time_until_cutoff`` is present only when ``can_accept_today``.
    - Naive ``now`` values are treated as bank-local wall-clock time; aware
      values are converted to the registry time zone first.

Usage:
    from bankfile_engines.schedule import evaluate_schedule

    status = evaluate_schedule(bank, now=datetime(2024, 1, 8, 13, 59))
    status.can_accept_today   # True for a 14:00 cutoff on a Monday
    status.time_until_cutoff  # timedelta(minutes=1)
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo

from bankfile_engines.tracer import traced_engine
from bankfile_kernel.domain.banking import WEEKDAY_NAMES, BankDefinition
from bankfile_kernel.domain.payments import ScheduleStatus


def to_bank_local(now: datetime, zone: tzinfo | None = None) -> datetime:
    """Express ``now`` on the bank's wall clock."""
    if now.tzinfo is None or zone is None:
        return now
    return now.astimezone(zone)


def next_processing_date(
    bank: BankDefinition,
    today: date,
    can_accept_today: bool,
) -> date | None:
    """
    First date the bank will process a batch submitted now.

    Returns ``today`` when the batch makes today's cutoff, otherwise the
    next working day.  None if the bank declares no working days.
    """
    if can_accept_today:
        return today
    for offset in range(1, 8):
        candidate = today + timedelta(days=offset)
        if bank.is_working_day(WEEKDAY_NAMES[candidate.weekday()]):
            return candidate
    return None


@traced_engine("schedule", "1.0", fingerprint_fields=("now",))
def evaluate_schedule(
    bank: BankDefinition,
    *,
    now: datetime,
    zone: tzinfo | None = None,
) -> ScheduleStatus:
    """
    Evaluate working-day and cutoff status for ``bank`` at ``now``.

    Args:
        bank: Target bank definition.
        now: Reference instant supplied by the caller.
        zone: Registry time zone used to convert aware ``now`` values.
    """
    local = to_bank_local(now, zone)
    weekday = WEEKDAY_NAMES[local.weekday()]
    is_working_day = bank.is_working_day(weekday)

    cutoff_at = datetime.combine(local.date(), bank.cutoff_time, tzinfo=local.tzinfo)
    can_accept_today = is_working_day and local < cutoff_at

    return ScheduleStatus(
        bank_code=bank.code,
        evaluated_at=local,
        weekday=weekday,
        is_working_day=is_working_day,
        can_accept_today=can_accept_today,
        cutoff_at=cutoff_at,
        time_until_cutoff=cutoff_at - local if can_accept_today else None,
        next_processing_date=next_processing_date(bank, local.date(), can_accept_today),
    )


def describe_time_until_cutoff(status: ScheduleStatus) -> str:
    """Short label such as ``"2h 15m"``, ``"45m"`` or ``"Closed"``."""
    remaining = status.time_until_cutoff
    if remaining is None or remaining <= timedelta(0):
        return "Closed"
    total_minutes = int(remaining.total_seconds() // 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
