"""
Tests for the REST client: request payloads and response classification
"""

import json
from unittest.mock import MagicMock

import pytest
import requests

from src.client.api_client import RestApiClient
from src.client.exceptions import ApiRejectedError, TransportError, UnexpectedResponseError
from src.models.config import ClientConfig


def make_response(status_code=200, body=None, text=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text if text is not None else (json.dumps(body) if body is not None else "")
    return resp


def make_client(*responses):
    session = MagicMock()
    session.headers = {}
    session.post.side_effect = list(responses)
    config = ClientConfig(base_url="http://nlp.test/api/v1", request_timeout_s=5)
    return RestApiClient(config, session=session), session


def sent_body(session, call_index=0):
    return session.post.call_args_list[call_index].kwargs["json"]


def test_signin_returns_access_token():
    client, session = make_client(
        make_response(body={"status": "API_OK", "accessToken": "tok"})
    )

    assert client.signin() == "tok"

    url = session.post.call_args.args[0]
    assert url == "http://nlp.test/api/v1/user/signin"
    assert sent_body(session) == {"email": "admin@admin.com", "passwd": "admin"}
    assert session.post.call_args.kwargs["timeout"] == 5


def test_caller_session_headers_left_untouched():
    """Body goes out through requests' json= encoding; the session is not reconfigured"""
    client, session = make_client(
        make_response(body={"status": "API_OK", "accessToken": "tok"})
    )

    client.signin()

    assert session.headers == {}
    assert "data" not in session.post.call_args.kwargs


def test_ask_sends_test_flag():
    client, session = make_client(
        make_response(body={"status": "API_OK", "srvReqId": "r-1"})
    )

    assert client.ask("tok", "what is the weather", 42) == "r-1"
    assert sent_body(session) == {
        "accessToken": "tok",
        "txt": "what is the weather",
        "dsId": 42,
        "isTest": True,
    }


def test_create_datasource_payload():
    client, session = make_client(make_response(body={"status": "API_OK", "id": 17}))

    assert client.create_datasource("tok", "weather.model", 3) == 17
    body = sent_body(session)
    assert body["name"] == "test-3"
    assert body["mdlId"] == "weather.model"
    assert body["shortDesc"] == "Test datasource"


def test_cancel_sends_request_ids():
    client, session = make_client(make_response(body={"status": "API_OK"}))

    client.cancel("tok", {"b", "a"})

    assert sent_body(session) == {"accessToken": "tok", "srvReqIds": ["a", "b"]}


def test_check_parses_states():
    client, _ = make_client(
        make_response(
            body={
                "status": "API_OK",
                "states": [
                    {
                        "srvReqId": "r-1",
                        "usrId": 1,
                        "dsId": 2,
                        "resType": "text",
                        "resBody": "sunny",
                        "status": "QRY_READY",
                        "createTstamp": 10,
                        "updateTstamp": 30,
                    }
                ],
            }
        )
    )

    states = client.check("tok")

    assert len(states) == 1
    assert states[0].request_id == "r-1"
    assert states[0].result_body == "sunny"
    assert states[0].processing_time_ms == 20


def test_list_datasources():
    client, _ = make_client(
        make_response(
            body={"status": "API_OK", "dataSources": [{"id": 1, "mdlId": "m1"}, {"id": 2}]}
        )
    )

    datasources = client.list_datasources("tok")

    assert [(d.datasource_id, d.model_id) for d in datasources] == [(1, "m1"), (2, None)]


def test_http_400_is_rejection():
    client, _ = make_client(make_response(400, text='{"status": "NC_INVALID_FIELD"}'))

    with pytest.raises(ApiRejectedError):
        client.signin()


def test_non_ok_status_is_rejection():
    client, _ = make_client(make_response(body={"status": "NC_ERROR"}))

    with pytest.raises(ApiRejectedError) as exc_info:
        client.signout("tok")

    assert exc_info.value.status == "NC_ERROR"


@pytest.mark.parametrize(
    "response",
    [
        make_response(500, text="Internal error"),
        make_response(200, text=""),
        make_response(200, text="<html>not json</html>"),
        make_response(200, body=["API_OK"]),
        make_response(200, body={"accessToken": "tok"}),
        make_response(200, body={"status": "API_OK"}),
    ],
)
def test_malformed_responses_are_unexpected(response):
    """Malformed responses are distinguishable from explicit rejections"""
    client, _ = make_client(response)

    with pytest.raises(UnexpectedResponseError):
        client.signin()


def test_invalid_state_record_is_unexpected():
    client, _ = make_client(
        make_response(body={"status": "API_OK", "states": [{"srvReqId": "r-1"}]})
    )

    with pytest.raises(UnexpectedResponseError):
        client.check("tok")


def test_connection_failure_is_transport_error():
    client, _ = make_client(requests.ConnectionError("refused"))

    with pytest.raises(TransportError):
        client.signin()
