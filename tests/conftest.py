"""
Shared fixtures: in-memory query service and a fake clock
"""

import threading
import time
from typing import Dict, List, Optional, Set

import pytest

from src.client.exceptions import ApiRejectedError
from src.models.batch_models import STATUS_QRY_READY, DatasourceInfo, RequestState
from src.models.config import ClientConfig


class FakeClock:
    """Clock whose sleep advances time instantly"""

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def clock(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeApiClient:
    """
    In-memory stand-in for RestApiClient.

    Requests become ready after `ready_after` check calls (per text, default 1);
    texts in `never_ready` stay pending forever.
    """

    def __init__(self, existing_datasources: Optional[Dict[int, str]] = None):
        self.config = ClientConfig()
        self.events: List[tuple] = []
        self.datasources: Dict[int, str] = dict(existing_datasources or {})
        self.next_ds_id = 100
        self.next_req = 0

        self.signin_error: Optional[Exception] = None
        self.signout_error: Optional[Exception] = None
        self.check_error: Optional[Exception] = None
        self.cancel_error: Optional[Exception] = None
        self.clear_error: Optional[Exception] = None
        self.delete_error: Optional[Exception] = None
        self.rejected_models: Set[str] = set()
        self.failing_deletes: Set[int] = set()
        self.ask_errors: Dict[str, str] = {}
        self.result_errors: Dict[str, str] = {}
        self.ready_after: Dict[str, int] = {}
        self.never_ready: Set[str] = set()

        self.requests: Dict[str, dict] = {}
        self.outstanding_at_ask: List[int] = []
        self.closed = False

        # Sessions open at the same time, across threads
        self.signin_delay_s = 0.0
        self.open_sessions = 0
        self.max_open_sessions = 0
        self._sessions_lock = threading.Lock()

    # Helpers

    def calls(self, name: str) -> List[tuple]:
        return [e for e in self.events if e[0] == name]

    def names(self) -> List[str]:
        return [e[0] for e in self.events]

    # RestApiClient surface

    def signin(self) -> str:
        self.events.append(("signin",))
        if self.signin_error:
            raise self.signin_error
        with self._sessions_lock:
            self.open_sessions += 1
            self.max_open_sessions = max(self.max_open_sessions, self.open_sessions)
        time.sleep(self.signin_delay_s)
        return "token-1"

    def signout(self, token: str) -> None:
        self.events.append(("signout", token))
        with self._sessions_lock:
            self.open_sessions -= 1
        if self.signout_error:
            raise self.signout_error

    def create_datasource(self, token: str, model_id: str, ordinal: int) -> int:
        self.events.append(("create_datasource", model_id, ordinal))
        if model_id in self.rejected_models:
            raise ApiRejectedError(f"Unknown model: {model_id}")
        ds_id = self.next_ds_id
        self.next_ds_id += 1
        self.datasources[ds_id] = model_id
        return ds_id

    def delete_datasource(self, token: str, datasource_id: int) -> None:
        self.events.append(("delete_datasource", datasource_id))
        if self.delete_error:
            raise self.delete_error
        if datasource_id in self.failing_deletes:
            raise ApiRejectedError(f"Cannot delete: {datasource_id}")
        self.datasources.pop(datasource_id, None)

    def list_datasources(self, token: str) -> List[DatasourceInfo]:
        self.events.append(("list_datasources",))
        return [DatasourceInfo(id=k, mdlId=v) for k, v in self.datasources.items()]

    def clear_conversation(self, token: str, datasource_id: int) -> None:
        self.events.append(("clear_conversation", datasource_id))
        if self.clear_error:
            raise self.clear_error

    def ask(self, token: str, text: str, datasource_id: int) -> str:
        self.events.append(("ask", text, datasource_id))
        if text in self.ask_errors:
            raise ApiRejectedError(self.ask_errors[text])

        self.outstanding_at_ask.append(
            sum(1 for r in self.requests.values() if not r["delivered"])
        )

        self.next_req += 1
        req_id = f"req-{self.next_req}"
        self.requests[req_id] = {
            "text": text,
            "ds_id": datasource_id,
            "checks_left": self.ready_after.get(text, 1),
            "delivered": False,
            "seq": self.next_req,
        }
        return req_id

    def check(self, token: str) -> List[RequestState]:
        self.events.append(("check",))
        if self.check_error:
            raise self.check_error

        states = [
            # Request of another client, never part of this batch
            RequestState(srvReqId="foreign-1", dsId=1, status=STATUS_QRY_READY, resBody="x")
        ]
        for req_id, r in self.requests.items():
            if r["text"] not in self.never_ready:
                r["checks_left"] -= 1
            ready = r["checks_left"] <= 0 and r["text"] not in self.never_ready
            error = self.result_errors.get(r["text"])
            states.append(
                RequestState(
                    srvReqId=req_id,
                    dsId=r["ds_id"],
                    status=STATUS_QRY_READY if ready else "QRY_ENLISTED",
                    resType=None if error else "text/plain",
                    resBody=None if error else f"answer: {r['text']}",
                    error=error,
                    createTstamp=1000,
                    updateTstamp=1000 + 10 * r["seq"],
                )
            )
            if ready:
                r["delivered"] = True
        return states

    def cancel(self, token: str, request_ids) -> None:
        self.events.append(("cancel", sorted(request_ids)))
        if self.cancel_error:
            raise self.cancel_error

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client():
    return FakeApiClient(existing_datasources={1: "existing.model"})


@pytest.fixture
def fake_clock():
    return FakeClock()
