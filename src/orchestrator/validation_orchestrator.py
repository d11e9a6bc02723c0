"""
Validation Orchestrator Module
Single Responsibility: Apply caller-supplied check predicates to test results
"""

from typing import List

from src.models.batch_models import QueryResult, TestResult, TestSentence
from src.utils.logging_config import get_logger

logger = get_logger(__name__)

CHECK_RESULT_FAILED = "Check result function invocation was not successful"
CHECK_ERROR_FAILED = "Check error function invocation was not successful"


class ValidationOrchestrator:
    """
    Runs `check_result` / `check_error` predicates against results.
    A failed check sets `validation_error`; result and error stay untouched.
    """

    def validate(self, sentence: TestSentence, result: TestResult) -> TestResult:
        """
        Validates one result against its sentence's expectation.

        Args:
            sentence: Originating test sentence
            result: Correlated test result

        Returns:
            The result, with `validation_error` set when a check failed
        """
        if sentence.is_successful and sentence.check_result is not None:
            # A request that errored cannot satisfy a result check
            if result.error is not None:
                passed = False
            else:
                passed = self._invoke(
                    sentence,
                    sentence.check_result,
                    QueryResult(type=result.result_type, body=result.result),
                )
            if not passed:
                return self._fail(result, CHECK_RESULT_FAILED)

        elif not sentence.is_successful and sentence.check_error is not None:
            if result.error is None:
                passed = False
            else:
                passed = self._invoke(sentence, sentence.check_error, result.error)
            if not passed:
                return self._fail(result, CHECK_ERROR_FAILED)

        return result

    def validate_all(
        self, sentences: List[TestSentence], results: List[TestResult]
    ) -> List[TestResult]:
        """Validates positionally matched sentences and results."""
        validated = [self.validate(s, r) for s, r in zip(sentences, results)]

        failed = sum(1 for r in validated if not r.passed)
        logger.info(f"Validation complete: {len(validated) - failed} passed, {failed} failed")

        return validated

    @staticmethod
    def _invoke(sentence: TestSentence, check, value) -> bool:
        try:
            return bool(check(value))
        except Exception as e:
            logger.error(
                f"Check function raised for '{sentence.text}': {type(e).__name__}: {e}",
                exc_info=True,
            )
            return False

    @staticmethod
    def _fail(result: TestResult, message: str) -> TestResult:
        logger.debug(f"Validation failed for '{result.text}': {message}")
        return result.model_copy(update={"validation_error": message})
