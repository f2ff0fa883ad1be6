"""Data models for txd_client."""

from txd_client.models.config import ClientConfig, PollConfig
from txd_client.models.records import (
    PollState,
    StatusUpdate,
    SubmissionResult,
    SubmissionStatus,
)

__all__ = [
    "ClientConfig", "PollConfig",
    "PollState", "StatusUpdate", "SubmissionResult", "SubmissionStatus",
]
