"""
Client Module
"""

from .api_client import RestApiClient
from .exceptions import (
    ApiRejectedError,
    AuthError,
    BatchConfigurationError,
    PollTimeoutError,
    ProvisionError,
    ResultCorrelationError,
    SubmissionError,
    TestClientError,
    TransportError,
    UnexpectedResponseError,
)

__all__ = [
    "RestApiClient",
    "ApiRejectedError",
    "AuthError",
    "BatchConfigurationError",
    "PollTimeoutError",
    "ProvisionError",
    "ResultCorrelationError",
    "SubmissionError",
    "TestClientError",
    "TransportError",
    "UnexpectedResponseError",
]
