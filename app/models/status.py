"""
Status model for JobTrack
Defines the application lifecycle states and their display metadata
"""

from enum import Enum
from typing import Union


class ApplicationStatus(str, Enum):
    """Job application lifecycle statuses"""
    APPLIED = "applied"
    SCREENING = "screening"
    TEST = "test"
    INTERVIEW_USER = "interview_user"
    INTERVIEW_HR = "interview_hr"
    INTERVIEW_FINAL = "interview_final"
    OFFERED = "offered"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


# Deprecated 4-value scheme still present in older rows
LEGACY_INTERVIEW = "interview"

TERMINAL_STATUSES = frozenset({
    ApplicationStatus.ACCEPTED,
    ApplicationStatus.REJECTED,
    ApplicationStatus.WITHDRAWN,
})

INTERVIEW_STAGE_STATUSES = (
    ApplicationStatus.SCREENING,
    ApplicationStatus.TEST,
    ApplicationStatus.INTERVIEW_USER,
    ApplicationStatus.INTERVIEW_HR,
    ApplicationStatus.INTERVIEW_FINAL,
)

STATUS_LABELS = {
    ApplicationStatus.APPLIED: "Applied",
    ApplicationStatus.SCREENING: "Screening",
    ApplicationStatus.TEST: "Test/Assessment",
    ApplicationStatus.INTERVIEW_USER: "Interview - Team",
    ApplicationStatus.INTERVIEW_HR: "Interview - HR",
    ApplicationStatus.INTERVIEW_FINAL: "Interview - Final",
    ApplicationStatus.OFFERED: "Offered",
    ApplicationStatus.ACCEPTED: "Accepted",
    ApplicationStatus.REJECTED: "Rejected",
    ApplicationStatus.WITHDRAWN: "Withdrawn",
}

StatusLike = Union[ApplicationStatus, str]


def _coerce(status: StatusLike):
    """Return the enum member for a status value, or None if it is unknown"""
    if isinstance(status, ApplicationStatus):
        return status
    try:
        return ApplicationStatus(status)
    except ValueError:
        return None


def is_terminal(status: StatusLike) -> bool:
    """True for statuses no automatic transition may leave"""
    return _coerce(status) in TERMINAL_STATUSES


def normalize_legacy_status(status: StatusLike) -> ApplicationStatus:
    """
    Map a status from the old applied/interview/accepted/rejected scheme
    onto the current one.

    The old scheme had a single ``interview`` value; it is mapped to
    ``interview_user`` since the first interview round is the earliest stage
    it could have meant. Current values pass through unchanged.
    """
    if status == LEGACY_INTERVIEW:
        return ApplicationStatus.INTERVIEW_USER
    member = _coerce(status)
    if member is None:
        raise ValueError(f"Unknown application status: {status!r}")
    return member


def status_label(status: StatusLike) -> str:
    """Human readable label, falling back to the raw value"""
    if status == LEGACY_INTERVIEW:
        return "Interview"
    member = _coerce(status)
    if member is None:
        return str(status)
    return STATUS_LABELS[member]
