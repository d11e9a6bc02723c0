"""
Result Correlator Module
Single Responsibility: Turn completion records and submission failures into results
"""

from typing import Dict, List

from src.client.exceptions import ResultCorrelationError
from src.models.batch_models import RequestState, ResolvedSentence, StepOutcome, TestResult
from src.utils.logging_config import get_logger

logger = get_logger(__name__)


class ResultCorrelator:
    """
    Collects step outcomes and assembles results in batch order.
    Each sentence must end with exactly one result.
    """

    def __init__(self, sentences: List[ResolvedSentence]):
        self.sentences = {s.index: s for s in sentences}
        self.results: Dict[int, TestResult] = {}

    def add(self, outcome: StepOutcome) -> None:
        """Records the results of one dispatch step."""
        for index, state in outcome.resolved.items():
            self._put(index, self.from_state(self.sentences[index], state))

        for index, message in outcome.submission_failures.items():
            self._put(index, self.from_submission_error(self.sentences[index], message))

    def _put(self, index: int, result: TestResult) -> None:
        if index in self.results:
            raise ResultCorrelationError(
                f"Sentence correlated twice: '{self.sentences[index].sentence.text}'"
            )
        self.results[index] = result

    @staticmethod
    def from_state(sentence: ResolvedSentence, state: RequestState) -> TestResult:
        return TestResult(
            text=sentence.sentence.text,
            datasource_id=sentence.datasource_id,
            model_id=sentence.model_id,
            result_type=state.result_type,
            result=state.result_body,
            error=state.error,
            processing_time_ms=state.processing_time_ms,
        )

    @staticmethod
    def from_submission_error(sentence: ResolvedSentence, message: str) -> TestResult:
        # Never polled, so no processing time
        return TestResult(
            text=sentence.sentence.text,
            datasource_id=sentence.datasource_id,
            model_id=sentence.model_id,
            error=message,
            processing_time_ms=0,
        )

    def assemble(self) -> List[TestResult]:
        """
        Returns results positionally matched to the batch.

        Raises:
            ResultCorrelationError: If any sentence has no result
        """
        missing = [
            self.sentences[i].sentence.text for i in sorted(self.sentences) if i not in self.results
        ]
        if missing:
            raise ResultCorrelationError(f"Sentences without result: {missing}")

        logger.debug(f"Correlated {len(self.results)} result(s)")
        return [self.results[i] for i in sorted(self.sentences)]
