"""
Batch Orchestrator Module
Coordinates all single-responsibility modules for one test batch
"""

import json
import threading
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from src.client.api_client import RestApiClient
from src.client.exceptions import BatchConfigurationError, PollTimeoutError
from src.models.batch_models import ResolvedSentence, TestResult, TestSentence
from src.models.config import ClientConfig
from src.orchestrator.dispatch_planner import DispatchPlanner
from src.orchestrator.polling_engine import PollingEngine
from src.orchestrator.resource_provisioner import ResourceProvisioner
from src.orchestrator.result_correlator import ResultCorrelator
from src.orchestrator.result_formatter import ResultFormatter
from src.orchestrator.session_coordinator import SessionCoordinator
from src.orchestrator.validation_orchestrator import ValidationOrchestrator
from src.utils.logging_config import get_logger

# Get logger for this module
logger = get_logger(__name__)


class TestBatchOrchestrator:
    """
    Runs a batch of test sentences against the query service.

    Workflow:
    1. Reject duplicated sentences (before any remote call)
    2. Sign in (SessionCoordinator)
    3. Create one test datasource per model (ResourceProvisioner)
    4. Plan dispatch from configuration flags (DispatchPlanner)
    5. For each step: clear conversations, submit and poll (PollingEngine)
    6. Correlate completions to sentences (ResultCorrelator)
    7. Delete test datasources, sign out
    8. Apply check functions (ValidationOrchestrator) and report (ResultFormatter)

    `run()` is blocking and serialized per instance.
    """

    __test__ = False

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        client: Optional[RestApiClient] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize orchestrator with all component dependencies.

        Args:
            config: Client configuration (default: built from environment)
            client: REST client (default: created from config)
            clock: Monotonic time source used by the check loop
            sleep: Blocking wait used between checks
        """
        self.config = config or ClientConfig.from_env()
        logger.info("Initializing TestBatchOrchestrator")
        logger.debug(
            f"Configuration: base_url={self.config.base_url}, "
            f"check_interval_ms={self.config.check_interval_ms}, "
            f"max_check_time_ms={self.config.max_check_time_ms}, "
            f"clear_conversation={self.config.clear_conversation}, "
            f"async_mode={self.config.async_mode}"
        )

        self.client = client or RestApiClient(self.config)
        self._lock = threading.Lock()

        self.session_coordinator = SessionCoordinator(self.client)
        self.provisioner = ResourceProvisioner(self.client)
        self.planner = DispatchPlanner(
            clear_conversation=self.config.clear_conversation,
            async_mode=self.config.async_mode,
        )
        self.engine = PollingEngine(
            self.client,
            check_interval_ms=self.config.check_interval_ms,
            max_check_time_ms=self.config.max_check_time_ms,
            clock=clock,
            sleep=sleep,
        )
        self.validator = ValidationOrchestrator()

    def run(self, sentences: Iterable[TestSentence]) -> List[TestResult]:
        """
        Main entry point: executes a batch and reports it.

        Args:
            sentences: Test sentences, in the order results are wanted

        Returns:
            One result per sentence, in the same order

        Raises:
            BatchConfigurationError: Duplicated sentences
            AuthError: Sign-in failed
            ProvisionError: Test datasource could not be created or listed
            PollTimeoutError: Requests still pending after max check time
        """
        sentences = list(sentences)

        with self._lock:
            self.check_duplicates(sentences)

            if not sentences:
                logger.warning("Empty test batch, nothing to run")
                return []

            logger.info(f"Starting test batch: {len(sentences)} sentence(s)")
            started = time.monotonic()

            results = self._execute(sentences)
            results = self.validator.validate_all(sentences, results)

            ResultFormatter.report(sentences, results)

            logger.info(f"Test batch completed in {time.monotonic() - started:.2f}s")
            return results

    def _execute(self, sentences: List[TestSentence]) -> List[TestResult]:
        model_ids = self._distinct_models(sentences)

        with self.session_coordinator.session() as token:
            with self.provisioner.provisioned(token, model_ids) as new_ds_ids:
                ds_models = self.provisioner.lookup_models(token)
                resolved = self._resolve(sentences, new_ds_ids, ds_models)

                plan = self.planner.plan(resolved)
                correlator = ResultCorrelator(resolved)

                for step in plan.steps:
                    for ds_id in step.clear_datasource_ids:
                        self.client.clear_conversation(token, ds_id)

                    outcome = self.engine.run(token, step.sentences)

                    if outcome.timed_out:
                        raise PollTimeoutError(self.config.max_check_time_ms, outcome.pending)

                    correlator.add(outcome)

                return correlator.assemble()

    @staticmethod
    def check_duplicates(sentences: Sequence[TestSentence]) -> None:
        """
        Rejects repeated (text, datasource) and (text, model) pairs.

        Raises:
            BatchConfigurationError: If any pair occurs more than once
        """
        TestBatchOrchestrator._check_pairs(
            [(s.text, s.datasource_id) for s in sentences if s.datasource_id is not None],
            "datasource",
        )
        TestBatchOrchestrator._check_pairs(
            [(s.text, s.model_id) for s in sentences if s.model_id is not None],
            "model",
        )

    @staticmethod
    def _check_pairs(pairs: List[Tuple[str, object]], field_name: str) -> None:
        seen = set()
        dups = []
        for pair in pairs:
            if pair in seen:
                dups.append(pair)
            seen.add(pair)

        if dups:
            details = ";".join(f"sentence={t}, {field_name}={v}" for t, v in dups)
            logger.error(f"Duplicated sentences within same {field_name}: [{details}]")
            raise BatchConfigurationError(
                f"Sentences texts cannot be duplicated within same {field_name}: [{details}]"
            )

    @staticmethod
    def _distinct_models(sentences: List[TestSentence]) -> List[str]:
        model_ids: List[str] = []
        for s in sentences:
            if s.model_id is not None and s.model_id not in model_ids:
                model_ids.append(s.model_id)
        return model_ids

    @staticmethod
    def _resolve(
        sentences: List[TestSentence],
        new_ds_ids: Dict[str, int],
        ds_models: Dict[int, str],
    ) -> List[ResolvedSentence]:
        resolved = []
        for i, s in enumerate(sentences):
            ds_id = s.datasource_id if s.datasource_id is not None else new_ds_ids[s.model_id]
            resolved.append(
                ResolvedSentence(
                    index=i,
                    sentence=s,
                    datasource_id=ds_id,
                    model_id=ds_models.get(ds_id, s.model_id),
                )
            )
        return resolved

    def close(self):
        """Cleanup resources"""
        logger.info("Closing orchestrator resources")
        self.client.close()


def load_sentences(path: str) -> List[TestSentence]:
    """
    Loads test sentences from a JSON file.

    The file holds a list of objects with `text`, one of `datasource_id` /
    `model_id`, and optionally `is_successful`.
    """
    with open(Path(path), "r", encoding="utf-8") as f:
        items = json.load(f)

    if not isinstance(items, list):
        raise BatchConfigurationError(f"Sentences file must contain a JSON list: {path}")

    return [TestSentence(**item) for item in items]


# ==========================================
# CLI ENTRY POINT
# ==========================================

if __name__ == "__main__":
    import argparse
    import sys

    from src.client.exceptions import TestClientError
    from src.utils.logging_config import setup_logging

    parser = argparse.ArgumentParser(description="NLP Batch Sentence Tester")
    parser.add_argument(
        "--sentences",
        type=str,
        required=True,
        help="JSON file with the test sentences",
    )
    parser.add_argument("--base-url", type=str, default=None, help="Query service REST URL")
    parser.add_argument(
        "--sync",
        action="store_true",
        help="Submit sentences one by one instead of all at once",
    )
    parser.add_argument(
        "--clear-conversation",
        action="store_true",
        help="Clear conversation before every sentence",
    )
    parser.add_argument(
        "--output", type=str, default=None, help="Optional CSV file for the results"
    )

    args = parser.parse_args()

    setup_logging()
    logger.info("Starting NLP Batch Sentence Tester")

    overrides = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.sync:
        overrides["async_mode"] = False
    if args.clear_conversation:
        overrides["clear_conversation"] = True

    orchestrator = None
    try:
        orchestrator = TestBatchOrchestrator(ClientConfig.from_env(**overrides))
        results = orchestrator.run(load_sentences(args.sentences))

        if args.output:
            ResultFormatter.to_dataframe(results).to_csv(args.output, index=False)
            logger.info(f"Results written to {args.output}")

        if all(r.passed for r in results):
            logger.info("All test sentences passed")
            sys.exit(0)
        else:
            logger.warning("Test batch completed with failures")
            sys.exit(1)

    except (TestClientError, ValueError, OSError) as e:
        logger.critical(f"Fatal error in test batch: {type(e).__name__}: {e}", exc_info=True)
        sys.exit(2)

    finally:
        if orchestrator is not None:
            orchestrator.close()
