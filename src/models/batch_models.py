"""
Test Batch Data Models
Pydantic v2 models for sentences, remote request states, and test results
"""

from typing import Annotated, Callable, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Terminal status reported by the `check` endpoint
STATUS_QRY_READY = "QRY_READY"

# ==========================================
# INPUT: TEST SENTENCES
# ==========================================


class QueryResult(BaseModel):
    """Result view handed to success-check predicates"""

    model_config = ConfigDict(frozen=True)

    type: Optional[str] = None
    body: Optional[str] = None


class TestSentence(BaseModel):
    """
    A single natural-language sentence to be asked against a datasource.

    Exactly one of `datasource_id` (existing datasource) or `model_id`
    (ephemeral datasource provisioned for the batch) must be given.
    """

    __test__ = False

    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str = Field(min_length=1)
    datasource_id: Optional[int] = None
    model_id: Optional[str] = None
    is_successful: bool = True
    check_result: Optional[Callable[[QueryResult], bool]] = None
    check_error: Optional[Callable[[str], bool]] = None

    @model_validator(mode="after")
    def _check_target_and_predicates(self) -> "TestSentence":
        if not self.text.strip():
            raise ValueError("Sentence text cannot be blank")

        if (self.datasource_id is None) == (self.model_id is None):
            raise ValueError(
                f"Exactly one of datasource_id or model_id must be set: '{self.text}'"
            )

        if self.check_result is not None and self.check_error is not None:
            raise ValueError(
                f"Only one of check_result or check_error can be set: '{self.text}'"
            )

        if self.check_result is not None and not self.is_successful:
            raise ValueError(
                f"check_result requires an expected successful sentence: '{self.text}'"
            )

        if self.check_error is not None and self.is_successful:
            raise ValueError(
                f"check_error requires an expected failing sentence: '{self.text}'"
            )

        return self

    @property
    def has_check(self) -> bool:
        """Whether a predicate matching the expected outcome is present"""
        if self.is_successful:
            return self.check_result is not None
        return self.check_error is not None


# ==========================================
# REMOTE RECORDS
# ==========================================


class DatasourceInfo(BaseModel):
    """Entry of the `ds/all` listing"""

    model_config = ConfigDict(populate_by_name=True)

    datasource_id: int = Field(alias="id")
    model_id: Optional[str] = Field(default=None, alias="mdlId")


class RequestState(BaseModel):
    """Remote-reported state of one asked sentence"""

    model_config = ConfigDict(populate_by_name=True)

    request_id: str = Field(alias="srvReqId")
    user_id: Optional[int] = Field(default=None, alias="usrId")
    datasource_id: Optional[int] = Field(default=None, alias="dsId")
    result_type: Optional[str] = Field(default=None, alias="resType")
    result_body: Optional[str] = Field(default=None, alias="resBody")
    status: str
    error: Optional[str] = None
    create_timestamp: int = Field(default=0, alias="createTstamp")
    update_timestamp: int = Field(default=0, alias="updateTstamp")

    @property
    def is_ready(self) -> bool:
        return self.status == STATUS_QRY_READY

    @property
    def processing_time_ms(self) -> int:
        return self.update_timestamp - self.create_timestamp


# ==========================================
# DISPATCH & OUTCOME KINDS
# ==========================================


class ResolvedSentence(BaseModel):
    """Sentence bound to the datasource it will be asked against"""

    model_config = ConfigDict(frozen=True)

    index: int  # Position in the caller's batch
    sentence: TestSentence
    datasource_id: int
    model_id: Optional[str] = None


class Submitted(BaseModel):
    """Ask accepted by the remote service"""

    kind: Literal["submitted"] = "submitted"
    request_id: str


class SubmissionFailed(BaseModel):
    """Ask rejected or failed before a request id was assigned"""

    kind: Literal["submission_failed"] = "submission_failed"
    message: str


SubmissionOutcome = Annotated[
    Union[Submitted, SubmissionFailed],
    Field(discriminator="kind"),
]


class PollOutcome(BaseModel):
    """Final state of one bounded polling run"""

    status: Literal["resolved", "timed_out"]
    resolved: Dict[str, RequestState] = Field(default_factory=dict)
    pending: List[str] = Field(default_factory=list)
    attempts: int = 0


class StepOutcome(BaseModel):
    """Submission and polling result for one dispatch step"""

    resolved: Dict[int, RequestState] = Field(default_factory=dict)
    submission_failures: Dict[int, str] = Field(default_factory=dict)
    timed_out: bool = False
    pending: List[str] = Field(default_factory=list)


# ==========================================
# OUTPUT: TEST RESULTS
# ==========================================


class TestResult(BaseModel):
    """Outcome of one sentence; `validation_error` unset means passed"""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    text: str
    datasource_id: int
    model_id: Optional[str] = None
    result_type: Optional[str] = None
    result: Optional[str] = None
    error: Optional[str] = None
    processing_time_ms: int = 0
    validation_error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.validation_error is None
