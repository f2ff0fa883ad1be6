"""Transaction relay client and submission poller."""

from txd_client.relay.client import META_PATH, RelayClient, SUBMISSION_PATH, submission_path
from txd_client.relay.poller import SubmissionPoller

__all__ = ["META_PATH", "RelayClient", "SUBMISSION_PATH", "SubmissionPoller", "submission_path"]
