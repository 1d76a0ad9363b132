"""
Caller-side Request Validation.

The generator trusts its input. This module answers the question the
"Add Visit" form asks before calling it: "Is this plan well-formed?"
Issues are keyed by the form field they belong to so a UI can show each
message next to its input.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from models import Frequency, RecurrenceRequest

logger = logging.getLogger(__name__)


@dataclass
class ValidationIssue:
    """Detailed reason for rejection."""
    field: str  # e.g. "endDate", "timeSlot_2"
    message: str


# Messages shown by the form, keyed by field family
MESSAGES = {
    "frequency": "Frequency is required",
    "visitsPerPeriod": "Visits per period must be at least 1",
    "startDate": "Start date is required",
    "endDate": "Please enter a valid end date",
    "occurrences": "Number of occurrences must be at least 1",
    "timeSlot": "Please enter a valid time (HH:mm)",
    "dayOfWeek": "Please select a day of week",
    "dayOfMonth": "Please enter a valid day of month (1-31)",
}

# Both the wire (camelCase) and Python field names map to the form key
_FIELD_KEYS = {
    "frequency": "frequency",
    "visitsPerPeriod": "visitsPerPeriod", "visits_per_period": "visitsPerPeriod",
    "startDate": "startDate", "start_date": "startDate",
    "endDate": "endDate", "end_date": "endDate",
    "occurrences": "occurrences",
    "timeSlots": "timeSlots", "time_slots": "timeSlots",
}

_SLOT_KEYS = {
    "time": "timeSlot",
    "dayOfWeek": "dayOfWeek", "day_of_week": "dayOfWeek",
    "dayOfMonth": "dayOfMonth", "day_of_month": "dayOfMonth",
}


def slot_count_message(visits_per_period: int) -> str:
    plural = "s" if visits_per_period > 1 else ""
    return f"Please configure {visits_per_period} time slot{plural}"


def _issue_from_error(error: Dict[str, Any]) -> ValidationIssue:
    """Translate one pydantic error location into a form-keyed issue."""
    loc = error.get("loc", ())
    top = _FIELD_KEYS.get(str(loc[0]), str(loc[0])) if loc else "request"

    if top == "timeSlots" and len(loc) >= 3 and isinstance(loc[1], int):
        family = _SLOT_KEYS.get(str(loc[2]), "timeSlot")
        return ValidationIssue(field=f"{family}_{loc[1]}", message=MESSAGES[family])

    return ValidationIssue(field=top, message=MESSAGES.get(top, error.get("msg", "Invalid value")))


def validate_request(request: RecurrenceRequest) -> List[ValidationIssue]:
    """
    Cross-field checks on an already-constructed request.
    Returns an empty list when the plan is acceptable.
    """
    issues: List[ValidationIssue] = []

    if len(request.time_slots) != request.visits_per_period:
        issues.append(ValidationIssue("timeSlots", slot_count_message(request.visits_per_period)))

    for i, slot in enumerate(request.time_slots):
        if request.frequency == Frequency.WEEKLY and slot.day_of_week is None:
            issues.append(ValidationIssue(f"dayOfWeek_{i}", MESSAGES["dayOfWeek"]))
        if request.frequency == Frequency.MONTHLY and slot.day_of_month is None:
            issues.append(ValidationIssue(f"dayOfMonth_{i}", MESSAGES["dayOfMonth"]))

    if request.end_date is not None and request.end_date < request.start_date:
        issues.append(ValidationIssue("endDate", "End date must be after start date"))

    if request.end_date is not None and request.occurrences is not None:
        issues.append(ValidationIssue(
            "occurrences",
            "Choose either an end date or a number of occurrences, not both"
        ))

    return issues


def validate_payload(payload: Mapping[str, Any]) -> Tuple[Optional[RecurrenceRequest], List[ValidationIssue]]:
    """
    Build a RecurrenceRequest from a raw JSON body and validate it.
    The request is None when the payload could not be parsed at all.
    """
    try:
        request = RecurrenceRequest.model_validate(payload)
    except ValidationError as e:
        issues = [_issue_from_error(err) for err in e.errors()]
        logger.debug(f"Payload rejected with {len(issues)} structural issue(s)")
        return None, issues

    return request, validate_request(request)


def issues_as_dict(issues: List[ValidationIssue]) -> Dict[str, str]:
    """Render issues as the {field: message} mapping the form expects. First message per field wins."""
    rendered: Dict[str, str] = {}
    for issue in issues:
        rendered.setdefault(issue.field, issue.message)
    return rendered
