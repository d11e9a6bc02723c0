"""
Result Formatter Module
Single Responsibility: Render test results and summary statistics
"""

from typing import Any, Dict, List

import pandas as pd
from tabulate import tabulate

from src.models.batch_models import TestResult, TestSentence
from src.utils.logging_config import get_logger

logger = get_logger(__name__)

RESULT_COLUMNS = [
    "Sentence",
    "Datasource ID",
    "Model ID",
    "Expected Result",
    "Has Check Function",
    "Result",
    "Error",
    "Validation",
    "Processing Time (ms)",
]

SUMMARY_COLUMNS = [
    "Tests Count",
    "Passed",
    "Failed",
    "Min Processing Time (ms)",
    "Max Processing Time (ms)",
    "Avg Processing Time (ms)",
]


class ResultFormatter:
    """
    Formats test results and summary reports.
    Pure formatting - no business logic.
    """

    @staticmethod
    def to_dataframe(results: List[TestResult]) -> pd.DataFrame:
        """Converts results to a DataFrame, one row per sentence."""
        columns = list(TestResult.model_fields.keys()) + ["passed"]
        rows = [dict(r.model_dump(), passed=r.passed) for r in results]
        return pd.DataFrame(rows, columns=columns)

    @staticmethod
    def generate_summary(results: List[TestResult]) -> Dict[str, Any]:
        """
        Aggregates results into pass/fail counts and timing statistics.

        Args:
            results: Validated test results

        Returns:
            Summary statistics dictionary
        """
        df = ResultFormatter.to_dataframe(results)
        total = len(df)
        passed = int(df["passed"].sum()) if total else 0
        times = df["processing_time_ms"]

        return {
            "tests_count": total,
            "passed_count": passed,
            "failed_count": total - passed,
            "min_processing_time_ms": int(times.min()) if total else 0,
            "max_processing_time_ms": int(times.max()) if total else 0,
            "avg_processing_time_ms": round(float(times.mean()), 2) if total else 0.0,
        }

    @staticmethod
    def format_results_table(
        sentences: List[TestSentence], results: List[TestResult]
    ) -> str:
        """Renders one row per sentence."""
        rows = [
            [
                r.text,
                r.datasource_id,
                r.model_id,
                s.is_successful,
                s.has_check,
                r.result,
                r.error,
                r.validation_error if r.validation_error is not None else "Passed",
                r.processing_time_ms,
            ]
            for s, r in zip(sentences, results)
        ]
        return ResultFormatter._grid(RESULT_COLUMNS, rows)

    @staticmethod
    def format_summary_table(summary: Dict[str, Any]) -> str:
        """Renders the single summary row."""
        row = [
            summary["tests_count"],
            summary["passed_count"],
            summary["failed_count"],
            summary["min_processing_time_ms"],
            summary["max_processing_time_ms"],
            summary["avg_processing_time_ms"],
        ]
        return ResultFormatter._grid(SUMMARY_COLUMNS, [row])

    @staticmethod
    def _grid(columns: List[str], rows: List[List[Any]]) -> str:
        # None renders as an empty cell; values are shown as given, not reformatted
        return (
            tabulate(
                rows,
                headers=columns,
                tablefmt="grid",
                missingval="",
                disable_numparse=True,
            )
            + "\n"
        )

    @staticmethod
    def report(sentences: List[TestSentence], results: List[TestResult]) -> str:
        """
        Logs the result and statistics tables.

        Returns:
            Both tables as one text block
        """
        results_table = ResultFormatter.format_results_table(sentences, results)
        summary_table = ResultFormatter.format_summary_table(
            ResultFormatter.generate_summary(results)
        )

        logger.info("Test result:\n" + results_table)
        logger.info("Tests statistic:\n" + summary_table)

        return results_table + summary_table
