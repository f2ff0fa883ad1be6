"""Records produced while submitting and polling a transaction."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SubmissionStatus(str, Enum):
    """Status values reported by the relay.

    The relay may report other strings too; only FINALIZED ends polling.
    """

    PENDING = "Pending"
    IN_BLOCK = "InBlock"
    FINALIZED = "Finalized"
    FAILED = "Failed"


class PollState(str, Enum):
    """States of the submission poller."""

    SUBMITTED = "submitted"
    POLLING = "polling"
    FINALIZED = "finalized"  # terminal success
    FAILED = "failed"  # terminal error


@dataclass(frozen=True)
class StatusUpdate:
    """One status observation returned by the relay."""

    attempt: int
    status: str
    observed_at: str  # ISO 8601

    @property
    def is_final(self) -> bool:
        return self.status == SubmissionStatus.FINALIZED.value


@dataclass
class SubmissionResult:
    """Outcome of a complete submit-and-wait run."""

    submission_id: str
    status: str
    call_data: str
    updates: list[StatusUpdate] = field(default_factory=list)

    @property
    def polls(self) -> int:
        return len(self.updates)
