"""
Polling Engine Module
Single Responsibility: Submit sentences and poll the check endpoint until resolved
"""

import time
from typing import Callable, Dict, List

import requests

from src.client.api_client import RestApiClient
from src.client.exceptions import SubmissionError, TestClientError
from src.models.batch_models import (
    PollOutcome,
    RequestState,
    ResolvedSentence,
    StepOutcome,
    Submitted,
    SubmissionFailed,
    SubmissionOutcome,
)
from src.utils.logging_config import get_logger

logger = get_logger(__name__)


class PollingEngine:
    """
    Submits `ask` requests and runs the bounded check loop.

    Loop states: Submitting -> Polling -> (Resolved | TimedOut). Requests
    left without a terminal state are cancelled before returning.
    """

    def __init__(
        self,
        client: RestApiClient,
        check_interval_ms: int,
        max_check_time_ms: int,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize polling engine.

        Args:
            client: REST client
            check_interval_ms: Wait between two check calls
            max_check_time_ms: Budget for the whole polling run
            clock: Monotonic time source in seconds
            sleep: Blocking wait in seconds
        """
        self.client = client
        self.check_interval_ms = check_interval_ms
        self.max_check_time_ms = max_check_time_ms
        self.clock = clock
        self.sleep = sleep

    def ask(self, token: str, sentence: ResolvedSentence) -> str:
        """
        Asks one sentence.

        Raises:
            SubmissionError: The service did not accept the sentence
        """
        try:
            return self.client.ask(token, sentence.sentence.text, sentence.datasource_id)
        except TestClientError as e:
            raise SubmissionError(str(e)) from e

    def submit(self, token: str, sentence: ResolvedSentence) -> SubmissionOutcome:
        """Asks one sentence; failures are returned, not raised."""
        try:
            request_id = self.ask(token, sentence)
        except SubmissionError as e:
            logger.warning(f"Sentence submission failed: '{sentence.sentence.text}': {e}")
            return SubmissionFailed(message=str(e))

        logger.debug(f"Sentence sent: {request_id}")
        return Submitted(request_id=request_id)

    def poll(self, token: str, request_ids: List[str]) -> PollOutcome:
        """
        Polls until every request id is ready or the budget is spent.

        A poll is only issued while its trailing wait still fits in the
        budget; the first poll is always issued.

        Args:
            token: Access token
            request_ids: Ids submitted by this run

        Returns:
            PollOutcome with the ready states keyed by request id
        """
        interval_s = self.check_interval_ms / 1000.0
        budget_s = self.max_check_time_ms / 1000.0

        wanted = set(request_ids)
        resolved: Dict[str, RequestState] = {}
        attempts = 0
        start_time = self.clock()

        while len(resolved) < len(wanted):
            if attempts > 0 and (self.clock() - start_time) + interval_s > budget_s:
                pending = sorted(wanted - resolved.keys())
                logger.warning(
                    f"Check budget exhausted after {attempts} attempt(s), "
                    f"{len(pending)} request(s) pending"
                )
                return PollOutcome(
                    status="timed_out", resolved=resolved, pending=pending, attempts=attempts
                )

            states = self.client.check(token)
            attempts += 1

            self.sleep(interval_s)

            # The check call reports every outstanding request of the user
            ready = {
                s.request_id: s
                for s in states
                if s.is_ready and s.request_id in wanted and s.request_id not in resolved
            }
            resolved.update(ready)

            logger.debug(f"Request processed: {len(ready)}")

        return PollOutcome(status="resolved", resolved=resolved, attempts=attempts)

    def cancel(self, token: str, request_ids: List[str]) -> None:
        """Best-effort cancel; failures are logged only."""
        if not request_ids:
            return
        try:
            self.client.cancel(token, request_ids)
        except (TestClientError, requests.RequestException) as e:
            logger.error(f"Tests request cancel error: {request_ids}: {e}", exc_info=True)

    def run(self, token: str, sentences: List[ResolvedSentence]) -> StepOutcome:
        """
        Submits all sentences, then polls for the accepted ones.

        Args:
            token: Access token
            sentences: Sentences of one dispatch step

        Returns:
            StepOutcome keyed by batch index
        """
        by_request: Dict[str, ResolvedSentence] = {}
        failures: Dict[int, str] = {}

        for sentence in sentences:
            outcome = self.submit(token, sentence)
            if isinstance(outcome, Submitted):
                by_request[outcome.request_id] = sentence
            else:
                failures[sentence.index] = outcome.message

        logger.debug(f"Sentences sent: {len(by_request)}")

        if not by_request:
            return StepOutcome(submission_failures=failures)

        poll_outcome = PollOutcome(status="timed_out", pending=sorted(by_request))
        try:
            poll_outcome = self.poll(token, list(by_request))
        finally:
            self.cancel(token, poll_outcome.pending)

        return StepOutcome(
            resolved={
                by_request[req_id].index: state
                for req_id, state in poll_outcome.resolved.items()
            },
            submission_failures=failures,
            timed_out=poll_outcome.status == "timed_out",
            pending=poll_outcome.pending,
        )
