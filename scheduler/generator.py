"""
The Recurring Visit Date Generator.

This module turns a RecurrenceRequest into concrete visit timestamps.
It is a pipeline of four pure stages:
1. Enumerate Periods (days / Sunday-aligned weeks / calendar months).
2. Map each Period + compiled slot rule to a candidate datetime.
3. Filter candidates by the start/end bounds.
4. Sort and de-duplicate.

Nothing here reads the clock or touches storage.
"""

import logging
from dataclasses import dataclass
from datetime import date as date_type, time as time_type, datetime, timedelta
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from dateutil.relativedelta import relativedelta

from models import Frequency, RecurrenceRequest, TimeSlot

logger = logging.getLogger(__name__)

# Upper bound on periods for plans with neither end_date nor occurrences.
OPEN_ENDED_PERIOD_CAP = 100


# --- Compiled Slot Rules ---

@dataclass(frozen=True)
class DailySlot:
    at: time_type


@dataclass(frozen=True)
class WeeklySlot:
    at: time_type
    day_of_week: int  # 0=Sunday


@dataclass(frozen=True)
class MonthlySlot:
    at: time_type
    day_of_month: int  # 1-31, clamped per month


SlotRule = Union[DailySlot, WeeklySlot, MonthlySlot]


@dataclass(frozen=True)
class Period:
    """One iteration unit of the recurrence. `first_day` is the start of its date range."""
    index: int
    first_day: date_type


def compile_slots(frequency: Frequency, slots: Iterable[TimeSlot]) -> List[SlotRule]:
    """
    Convert wire-shape TimeSlots into the rule variant for `frequency`.
    Slots missing the selector their frequency needs are dropped.
    """
    rules: List[SlotRule] = []
    for i, slot in enumerate(slots):
        at = slot.as_time()
        if frequency == Frequency.DAILY:
            rules.append(DailySlot(at=at))
        elif frequency == Frequency.WEEKLY:
            if slot.day_of_week is None:
                logger.debug(f"Skipping weekly slot {i} ({slot.time}): no day_of_week")
                continue
            rules.append(WeeklySlot(at=at, day_of_week=slot.day_of_week))
        elif frequency == Frequency.MONTHLY:
            if slot.day_of_month is None:
                logger.debug(f"Skipping monthly slot {i} ({slot.time}): no day_of_month")
                continue
            rules.append(MonthlySlot(at=at, day_of_month=slot.day_of_month))
    return rules


def week_start(day: date_type) -> date_type:
    """Sunday on or before `day`."""
    # date.weekday(): Monday=0 .. Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _period_first_day(frequency: Frequency, start_date: date_type, index: int) -> date_type:
    if frequency == Frequency.DAILY:
        return start_date + timedelta(days=index)
    if frequency == Frequency.WEEKLY:
        return week_start(start_date) + timedelta(weeks=index)
    return start_date.replace(day=1) + relativedelta(months=index)


def iter_periods(
    frequency: Frequency,
    start_date: date_type,
    end_date: Optional[date_type] = None,
    limit: Optional[int] = None
) -> Iterator[Period]:
    """
    Stage 1: yield periods in order until the range starts after `end_date`
    or `limit` periods have been produced. With neither bound this never ends.
    """
    index = 0
    while limit is None or index < limit:
        try:
            first_day = _period_first_day(frequency, start_date, index)
        except (OverflowError, ValueError):
            # Past date.max, so beyond any representable end_date
            return
        if end_date is not None and first_day > end_date:
            return
        yield Period(index=index, first_day=first_day)
        index += 1


def _resolve_day(rule: SlotRule, period: Period) -> date_type:
    if isinstance(rule, WeeklySlot):
        return period.first_day + timedelta(days=rule.day_of_week)
    if isinstance(rule, MonthlySlot):
        # relativedelta(day=N) clamps to the last day of the month
        return period.first_day + relativedelta(day=rule.day_of_month)
    return period.first_day


def period_candidates(period: Period, rules: Sequence[SlotRule]) -> List[datetime]:
    """Stage 2: one candidate datetime per rule for this period. Days past date.max are skipped."""
    candidates = []
    for rule in rules:
        try:
            day = _resolve_day(rule, period)
        except OverflowError:
            continue
        candidates.append(datetime.combine(day, rule.at))
    return candidates


def within_bounds(candidate: datetime, start_date: date_type, end_date: Optional[date_type]) -> bool:
    """Stage 3: drop candidates before the start or after the (inclusive) end."""
    day = candidate.date()
    if day < start_date:
        return False
    return end_date is None or day <= end_date


def sort_unique(candidates: Iterable[datetime]) -> List[datetime]:
    """Stage 4: ascending order, identical instants collapsed."""
    return sorted(set(candidates))


def period_limit(request: RecurrenceRequest, period_cap: int = OPEN_ENDED_PERIOD_CAP) -> Optional[int]:
    """
    How many periods to walk. `occurrences` counts periods, not visits.
    A plan bounded only by end_date has no period limit.
    """
    if request.occurrences is not None:
        return request.occurrences
    if request.end_date is not None:
        return None
    return period_cap


def generate_visit_datetimes(
    request: RecurrenceRequest,
    period_cap: int = OPEN_ENDED_PERIOD_CAP
) -> List[datetime]:
    """
    Enumerate every visit the request describes, sorted and de-duplicated.
    Returns an empty list when nothing can be scheduled; never raises for a
    well-formed request.
    """
    rules = compile_slots(request.frequency, request.time_slots)
    if not rules:
        logger.debug("No usable time slots for this frequency; nothing to generate")
        return []

    limit = period_limit(request, period_cap)
    periods = list(iter_periods(request.frequency, request.start_date, request.end_date, limit))

    if request.is_open_ended and periods and len(periods) >= period_cap:
        logger.info(
            f"Open-ended {request.frequency.value} plan truncated at {period_cap} periods "
            f"(last period starts {periods[-1].first_day.isoformat()})"
        )

    candidates = (c for period in periods for c in period_candidates(period, rules))
    in_range = (c for c in candidates if within_bounds(c, request.start_date, request.end_date))
    return sort_unique(in_range)


def iter_visit_datetimes(request: RecurrenceRequest) -> Iterator[datetime]:
    """
    Lazy, uncapped variant of `generate_visit_datetimes`.

    Periods are walked in order and every candidate of a period falls inside
    that period's range, so sorting per period keeps the stream ascending.
    For open-ended plans page through it with `itertools.islice`.
    """
    rules = compile_slots(request.frequency, request.time_slots)
    if not rules:
        return

    for period in iter_periods(request.frequency, request.start_date, request.end_date, request.occurrences):
        batch = [
            c for c in period_candidates(period, rules)
            if within_bounds(c, request.start_date, request.end_date)
        ]
        yield from sort_unique(batch)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 to the minute, e.g. '2024-01-01T09:00'."""
    return moment.isoformat(timespec="minutes")


def generate_visit_dates(
    frequency: Union[Frequency, str],
    visits_per_period: int,
    start_date: Union[date_type, str],
    time_slots: Sequence[Union[TimeSlot, dict]],
    end_date: Union[date_type, str, None] = None,
    occurrences: Optional[int] = None,
    period_cap: int = OPEN_ENDED_PERIOD_CAP
) -> List[str]:
    """
    Flat-argument entry point used by the booking layer and API callers.
    Returns ISO-8601 timestamps.
    """
    request = RecurrenceRequest(
        frequency=frequency,
        visits_per_period=visits_per_period,
        start_date=start_date,
        time_slots=list(time_slots),
        end_date=end_date,
        occurrences=occurrences
    )
    return [format_timestamp(moment) for moment in generate_visit_datetimes(request, period_cap)]
