"""
Client Configuration
Immutable settings bundle for one test batch orchestrator instance
"""

import os
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BASE_URL = "http://localhost:8081/api/v1/"
DEFAULT_EMAIL = "admin@admin.com"
DEFAULT_PASSWORD = "admin"
DEFAULT_CHECK_INTERVAL_MS = 2000
DEFAULT_MAX_CHECK_TIME_MS = 10 * 1000
DEFAULT_CLEAR_CONVERSATION = False
DEFAULT_ASYNC_MODE = True
DEFAULT_REQUEST_TIMEOUT_S = 30.0


class Credentials(BaseModel):
    """Sign-in credentials for the query service"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    email: str = DEFAULT_EMAIL
    password: str = Field(default=DEFAULT_PASSWORD, repr=False)


class ClientConfig(BaseModel):
    """
    Settings for the test batch orchestrator.

    `clear_conversation` forces one-sentence-at-a-time dispatch with the
    conversation cleared before every sentence; otherwise `async_mode`
    chooses between batched and sequential submission.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = DEFAULT_BASE_URL
    credentials: Credentials = Field(default_factory=Credentials)
    check_interval_ms: int = Field(default=DEFAULT_CHECK_INTERVAL_MS, gt=0)
    max_check_time_ms: int = Field(default=DEFAULT_MAX_CHECK_TIME_MS, gt=0)
    clear_conversation: bool = DEFAULT_CLEAR_CONVERSATION
    async_mode: bool = DEFAULT_ASYNC_MODE
    request_timeout_s: float = Field(default=DEFAULT_REQUEST_TIMEOUT_S, gt=0)

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("base_url cannot be empty")
        return value if value.endswith("/") else value + "/"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides: Any) -> "ClientConfig":
        """
        Builds configuration from environment variables (and .env file).

        Args:
            env_file: Optional explicit .env path (default: search from cwd)
            **overrides: Field values that win over the environment

        Returns:
            ClientConfig instance
        """
        load_dotenv(env_file)

        values: dict = {}

        base_url = os.getenv("NLP_TEST_BASE_URL")
        if base_url:
            values["base_url"] = base_url

        email = os.getenv("NLP_TEST_EMAIL")
        password = os.getenv("NLP_TEST_PASSWORD")
        if email or password:
            values["credentials"] = Credentials(
                email=email or DEFAULT_EMAIL,
                password=password or DEFAULT_PASSWORD,
            )

        int_vars = {
            "check_interval_ms": "NLP_TEST_CHECK_INTERVAL_MS",
            "max_check_time_ms": "NLP_TEST_MAX_CHECK_TIME_MS",
        }
        for field_name, var in int_vars.items():
            raw = os.getenv(var)
            if raw:
                values[field_name] = int(raw)

        timeout = os.getenv("NLP_TEST_REQUEST_TIMEOUT_S")
        if timeout:
            values["request_timeout_s"] = float(timeout)

        bool_vars = {
            "clear_conversation": "NLP_TEST_CLEAR_CONVERSATION",
            "async_mode": "NLP_TEST_ASYNC_MODE",
        }
        for field_name, var in bool_vars.items():
            raw = os.getenv(var)
            if raw:
                values[field_name] = raw.strip().lower() in ("1", "true", "yes", "on")

        values.update(overrides)
        return cls(**values)
