"""
HTTP client for the practice API.

``ApiClient`` is what ``PracticeSessionController`` uses as its question
bank. It keeps the session cookie set by ``/auth/login`` on the underlying
``httpx.Client``, so every later call is made as the signed-in user.
"""

import logging
from typing import Any

import httpx

from mcq_practice.core.exceptions import AuthError, FetchError, PermissionDeniedError
from mcq_practice.services.practice_controller import PracticeQuestion

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

_QUESTION_FIELDS = (
    "id",
    "text",
    "option_a",
    "option_b",
    "option_c",
    "option_d",
    "correct_option",
    "topic_id",
    "subtopic",
    "difficulty",
    "image_path",
    "explanation",
)


def _error_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    detail = body.get("detail")
    if isinstance(detail, list):
        # FastAPI request validation errors
        return "; ".join(str(item.get("msg", item)) for item in detail)
    return detail


class ApiClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        client: httpx.Client | None = None,
        timeout: float = 10.0,
    ):
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self._client.request(method, f"{API_PREFIX}{path}", **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise FetchError() from e

        if response.status_code == 401:
            raise AuthError(_error_message(response))
        if response.status_code == 403:
            raise PermissionDeniedError(_error_message(response))
        if response.is_error:
            message = _error_message(response)
            logger.warning(f"{method} {path} returned {response.status_code}: {message}")
            raise FetchError(message)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"{method} {path} returned a non-JSON body")
            raise FetchError() from e

    # -- auth --------------------------------------------------------------

    def login(self, username: str, password: str) -> dict:
        return self._request(
            "POST", "/auth/login", json={"username": username, "password": password}
        )

    def logout(self) -> None:
        self._request("POST", "/auth/logout")

    # -- question bank -----------------------------------------------------

    def random_questions(self, count: int, topic_id: int | None = None) -> list[PracticeQuestion]:
        params = {"count": count}
        if topic_id is not None:
            params["topic_id"] = topic_id
        data = self._request("GET", "/questions/random", params=params)
        if not isinstance(data, list):
            raise FetchError("Unexpected response from the question bank")
        try:
            return [
                PracticeQuestion(**{k: item[k] for k in _QUESTION_FIELDS if k in item})
                for item in data
            ]
        except (TypeError, KeyError) as e:
            raise FetchError("Unexpected response from the question bank") from e

    def get_topic(self, topic_id: int) -> dict:
        return self._request("GET", f"/topics/{topic_id}")

    def submit_session(self, payload: dict) -> int:
        data = self._request("POST", "/sessions/", json=payload)
        try:
            return int(data["id"])
        except (TypeError, KeyError, ValueError) as e:
            raise FetchError("Unexpected response when saving the session") from e

    def get_session(self, session_id: int) -> dict:
        return self._request("GET", f"/sessions/{session_id}")
