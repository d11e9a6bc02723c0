"""
REST API Client
Thin JSON-over-HTTP wrapper for the query service endpoints used by test batches
"""

import json
from typing import Any, Dict, Iterable, List, Optional

import requests
from pydantic import ValidationError

from src.client.exceptions import (
    ApiRejectedError,
    TransportError,
    UnexpectedResponseError,
)
from src.models.batch_models import DatasourceInfo, RequestState
from src.models.config import ClientConfig
from src.utils.logging_config import get_logger

logger = get_logger(__name__)

STATUS_API_OK = "API_OK"


class RestApiClient:
    """
    Client for the query service REST API.

    Each method maps to one endpoint and raises `ApiRejectedError` for an
    explicit rejection, `UnexpectedResponseError` for anything it cannot
    read, and `TransportError` when the HTTP call itself fails.
    """

    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None):
        """
        Initialize the REST client.

        Args:
            config: Client configuration (base URL, credentials, timeouts)
            session: Optional pre-configured requests session
        """
        self.config = config
        self.session = session or requests.Session()
        logger.debug(f"RestApiClient initialized for {config.base_url}")

    # ==========================================
    # TRANSPORT
    # ==========================================

    def _post(self, endpoint: str, **params: Any) -> Dict[str, Any]:
        """
        Posts a JSON body and returns the decoded, status-checked response.

        Args:
            endpoint: Path relative to the base URL
            **params: Body fields; None values are dropped

        Returns:
            Decoded JSON object
        """
        url = self.config.base_url + endpoint
        body = {k: v for k, v in params.items() if v is not None}

        logger.debug(f"Request prepared: POST {url}")

        try:
            resp = self.session.post(url, json=body, timeout=self.config.request_timeout_s)
        except requests.RequestException as e:
            raise TransportError(f"Request to '{endpoint}' failed: {e}") from e

        code = resp.status_code
        text = resp.text

        logger.debug(f"Response received [code={code}]: {text}")

        if not text:
            raise UnexpectedResponseError(
                f"Unexpected empty response [code={code}]", status_code=code
            )

        if code == 400:
            raise ApiRejectedError(text)

        if code != 200:
            raise UnexpectedResponseError(
                f"Unexpected response [code={code}, text={text}]", status_code=code
            )

        try:
            data = json.loads(text)
        except ValueError as e:
            raise UnexpectedResponseError(f"Response is not valid JSON: {text}") from e

        if not isinstance(data, dict):
            raise UnexpectedResponseError(f"Response is not a JSON object: {text}")

        status = self._get_field(data, "status")
        if status != STATUS_API_OK:
            raise ApiRejectedError(f"Unexpected message status: {status}", status=status)

        return data

    @staticmethod
    def _get_field(data: Dict[str, Any], name: str) -> Any:
        if data.get(name) is None:
            raise UnexpectedResponseError(
                f"Missed expected field [fields={sorted(data.keys())}, field={name}]"
            )
        return data[name]

    def _get_list(self, data: Dict[str, Any], name: str) -> List[Dict[str, Any]]:
        value = self._get_field(data, name)
        if not isinstance(value, list):
            raise UnexpectedResponseError(f"Invalid field type [field={name}, value={value}]")
        return value

    # ==========================================
    # SESSION
    # ==========================================

    def signin(self) -> str:
        """Signs in with configured credentials and returns the access token."""
        email = self.config.credentials.email
        logger.info(f"`user/signin` request sent for: {email}")

        data = self._post(
            "user/signin", email=email, passwd=self.config.credentials.password
        )
        token = self._get_field(data, "accessToken")
        if not isinstance(token, str):
            raise UnexpectedResponseError(f"Invalid field type: {token}")
        return token

    def signout(self, token: str) -> None:
        logger.info(f"`user/signout` request sent for: {self.config.credentials.email}")
        self._post("user/signout", accessToken=token)

    # ==========================================
    # DATASOURCES
    # ==========================================

    def create_datasource(self, token: str, model_id: str, ordinal: int) -> int:
        """
        Creates a disposable test datasource bound to a model.

        Args:
            token: Access token
            model_id: Model the datasource serves
            ordinal: Sequence number used in the datasource name

        Returns:
            New datasource id
        """
        logger.info(f"`ds/add` request sent for model: {model_id}")

        data = self._post(
            "ds/add",
            accessToken=token,
            name=f"test-{ordinal}",
            shortDesc="Test datasource",
            mdlId=model_id,
            mdlName="Test model",
            mdlVer="Test version",
        )
        ds_id = self._get_field(data, "id")
        if isinstance(ds_id, bool) or not isinstance(ds_id, int):
            raise UnexpectedResponseError(f"Invalid field type: {ds_id}")

        logger.info(f"Temporary test datasource created: {ds_id}")
        return ds_id

    def delete_datasource(self, token: str, datasource_id: int) -> None:
        logger.info(f"`ds/delete` request sent for datasource: {datasource_id}")
        self._post("ds/delete", accessToken=token, id=datasource_id)

    def list_datasources(self, token: str) -> List[DatasourceInfo]:
        logger.info(f"`ds/all` request sent for: {self.config.credentials.email}")

        data = self._post("ds/all", accessToken=token)
        try:
            return [
                DatasourceInfo.model_validate(item)
                for item in self._get_list(data, "dataSources")
            ]
        except ValidationError as e:
            raise UnexpectedResponseError(f"Invalid datasource record: {e}") from e

    def clear_conversation(self, token: str, datasource_id: int) -> None:
        logger.info(f"`clear/conversation` request sent for datasource: {datasource_id}")
        self._post("clear/conversation", accessToken=token, dsId=datasource_id)

    # ==========================================
    # REQUESTS
    # ==========================================

    def ask(self, token: str, text: str, datasource_id: int) -> str:
        """Submits a test sentence and returns the server request id."""
        logger.info(f"`ask` request sent: {text} to datasource: {datasource_id}")

        data = self._post(
            "ask", accessToken=token, txt=text, dsId=datasource_id, isTest=True
        )
        request_id = self._get_field(data, "srvReqId")
        if not isinstance(request_id, str):
            raise UnexpectedResponseError(f"Invalid field type: {request_id}")
        return request_id

    def check(self, token: str) -> List[RequestState]:
        """Returns states of all outstanding requests known for this user."""
        logger.info(f"`check` request sent for: {self.config.credentials.email}")

        data = self._post("check", accessToken=token)
        try:
            return [
                RequestState.model_validate(item)
                for item in self._get_list(data, "states")
            ]
        except ValidationError as e:
            raise UnexpectedResponseError(f"Invalid request state record: {e}") from e

    def cancel(self, token: str, request_ids: Iterable[str]) -> None:
        ids = sorted(request_ids)
        logger.info(f"`cancel` request sent for requests: {ids}")
        self._post("cancel", accessToken=token, srvReqIds=ids)

    def close(self) -> None:
        """Closes the underlying HTTP session"""
        self.session.close()
