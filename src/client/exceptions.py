"""
Test Client Exceptions
Error taxonomy shared by the REST client and the batch orchestrator
"""

from typing import List, Optional


class TestClientError(Exception):
    """Base exception for all test client errors."""

    __test__ = False


class TransportError(TestClientError):
    """HTTP call failed before a response was received."""


class UnexpectedResponseError(TestClientError):
    """Response was malformed or not one the client knows how to read."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ApiRejectedError(TestClientError):
    """Service explicitly rejected the request (HTTP 400 or non-OK status)."""

    def __init__(self, message: str, status: Optional[str] = None):
        self.status = status
        super().__init__(message)


class AuthError(TestClientError):
    """Sign-in failed."""


class ProvisionError(TestClientError):
    """Test datasource could not be created or looked up."""


class SubmissionError(TestClientError):
    """Sentence could not be submitted via `ask`."""


class BatchConfigurationError(TestClientError):
    """Batch is invalid, e.g. duplicated sentences."""


class ResultCorrelationError(TestClientError):
    """A sentence did not end with exactly one result."""


class PollTimeoutError(TestClientError, TimeoutError):
    """Requests were still pending when the check budget ran out."""

    def __init__(self, max_check_time_ms: int, pending: Optional[List[str]] = None):
        self.max_check_time_ms = max_check_time_ms
        self.pending = list(pending or [])
        super().__init__(f"Timed out waiting for response: {max_check_time_ms}")
