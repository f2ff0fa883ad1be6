"""Submission status poller - waits for a relay submission to finalize."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable

from substrateinterface import Keypair

from txd_client.errors import PollTimeoutError, TransportError, TxdError
from txd_client.interfaces.relay import Relay
from txd_client.models.config import PollConfig
from txd_client.models.records import PollState, StatusUpdate, SubmissionStatus

log = logging.getLogger(__name__)

StatusCallback = Callable[[StatusUpdate], None]


class SubmissionPoller:
    """Polls the relay until a submission reports ``Finalized``.

    State machine::

        SUBMITTED -> POLLING -> FINALIZED
                          \\--> FAILED

    Every poll first sleeps for the current interval, then asks the relay
    for the status. Only the exact string ``"Finalized"`` is terminal; any
    other status keeps the poller in POLLING. A malformed response, a
    rejected request or (by default) a transport error moves the poller to
    FAILED and the error is re-raised.

    With the default ``PollConfig`` there is no attempt limit or deadline.
    """

    def __init__(
        self,
        relay: Relay,
        keypair: Keypair,
        config: PollConfig | None = None,
        on_status: StatusCallback | None = None,
    ) -> None:
        self._relay = relay
        self._keypair = keypair
        self._config = config or PollConfig()
        self._on_status = on_status
        self._state: PollState | None = None
        self._submission_id: str | None = None
        self._failure: TxdError | None = None

    @property
    def state(self) -> PollState | None:
        return self._state

    @property
    def failure(self) -> TxdError | None:
        return self._failure

    @property
    def submission_id(self) -> str | None:
        return self._submission_id

    async def run(self, submission_id: str) -> list[StatusUpdate]:
        """Poll ``submission_id`` to a terminal state.

        Returns every observed status in order, the last one being
        ``Finalized``.
        """
        self._submission_id = submission_id
        self._state = PollState.SUBMITTED
        self._failure = None

        try:
            return await self._poll(submission_id)
        except TxdError as exc:
            self._state = PollState.FAILED
            self._failure = exc
            log.error("Polling %s failed: %s", submission_id, exc)
            raise

    async def _poll(self, submission_id: str) -> list[StatusUpdate]:
        cfg = self._config
        updates: list[StatusUpdate] = []
        started = time.monotonic()
        interval = cfg.interval
        attempt = 0
        transient_failures = 0

        while True:
            if cfg.max_attempts is not None and attempt >= cfg.max_attempts:
                raise PollTimeoutError(
                    f"submission {submission_id} not finalized after {attempt} polls",
                    submission_id=submission_id,
                    attempts=attempt,
                )

            delay = interval
            if cfg.deadline is not None:
                remaining = cfg.deadline - (time.monotonic() - started)
                if remaining <= 0:
                    raise self._deadline_error(submission_id, attempt)
                delay = min(interval, remaining)

            await asyncio.sleep(delay)
            if cfg.deadline is not None and time.monotonic() - started >= cfg.deadline:
                raise self._deadline_error(submission_id, attempt)

            self._state = PollState.POLLING
            attempt += 1

            try:
                status = await self._relay.get_status(submission_id, self._keypair)
            except TransportError as exc:
                if transient_failures >= cfg.transient_retries:
                    raise
                transient_failures += 1
                log.warning(
                    "Status poll %d for %s failed (%d/%d): %s",
                    attempt, submission_id, transient_failures, cfg.transient_retries, exc,
                )
                interval = cfg.next_interval(interval)
                continue

            transient_failures = 0
            update = StatusUpdate(
                attempt=attempt,
                status=status,
                observed_at=datetime.now(timezone.utc).isoformat(),
            )
            updates.append(update)
            if self._on_status is not None:
                self._on_status(update)

            if update.is_final:
                self._state = PollState.FINALIZED
                log.info("Submission %s finalized after %d polls", submission_id, attempt)
                return updates

            if status == SubmissionStatus.FAILED.value:
                # Reported by the relay but not terminal; it may still recover.
                log.warning("Relay reports submission %s as Failed", submission_id)
            else:
                log.debug("Submission %s status: %s", submission_id, status)

            interval = cfg.next_interval(interval)

    def _deadline_error(self, submission_id: str, attempts: int) -> PollTimeoutError:
        return PollTimeoutError(
            f"submission {submission_id} not finalized within {self._config.deadline}s",
            submission_id=submission_id,
            attempts=attempts,
        )
