"""
NLP Batch Tester - Data Models
"""

from .config import ClientConfig, Credentials
from .batch_models import (
    STATUS_QRY_READY,
    DatasourceInfo,
    PollOutcome,
    QueryResult,
    RequestState,
    ResolvedSentence,
    StepOutcome,
    Submitted,
    SubmissionFailed,
    SubmissionOutcome,
    TestResult,
    TestSentence,
)

__all__ = [
    "ClientConfig",
    "Credentials",
    "STATUS_QRY_READY",
    "DatasourceInfo",
    "PollOutcome",
    "QueryResult",
    "RequestState",
    "ResolvedSentence",
    "StepOutcome",
    "Submitted",
    "SubmissionFailed",
    "SubmissionOutcome",
    "TestResult",
    "TestSentence",
]
