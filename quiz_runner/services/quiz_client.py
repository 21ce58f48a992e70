"""
services/quiz_client.py

퀴즈 백엔드 HTTP 클라이언트 (httpx 비동기).
Public API:
  - fetch_quiz(quiz_id, token) -> QuizDefinition        : GET  /quizzes/{id}
  - submit_attempt(token, payload) -> SubmissionResult  : POST /results/submit

상태 코드 해석:
  - 불러오기: 401/403 → InvalidSession, 그 외 → LoadFailed(서버 메시지)
  - 제출:     401 → InvalidSession, 403 → AccessDenied(서버 메시지),
              그 외 → SubmitFailed
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from config import BACKEND_URL, REQUEST_TIMEOUT
from quiz_runner.models.payload import AttemptPayload, SubmissionResult
from quiz_runner.models.quiz_model import QuizDefinition
from quiz_runner.services.errors import AccessDenied, InvalidSession, LoadFailed, SubmitFailed

logger = logging.getLogger(__name__)

SUBMIT_FAILED_MESSAGE = "Failed to submit quiz."
ACCESS_DENIED_MESSAGE = "Access denied."


def _auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _server_message(response: httpx.Response) -> Optional[str]:
    """에러 응답 본문의 message 필드를 꺼낸다. JSON 이 아니면 None."""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        message = data.get("message")
        if message:
            return str(message)
    return None


class QuizApiClient:
    """퀴즈 조회/제출 두 가지 호출만 담당하는 얇은 클라이언트."""

    def __init__(
        self,
        base_url: str = BACKEND_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_quiz(self, quiz_id: str, token: str) -> QuizDefinition:
        try:
            response = await self._client.get(f"/quizzes/{quiz_id}", headers=_auth_headers(token))
        except httpx.HTTPError as e:
            logger.error(f"퀴즈 불러오기 네트워크 오류 (quiz={quiz_id}): {e}")
            raise LoadFailed(str(e) or "Network error") from e

        if response.status_code in (401, 403):
            logger.warning(f"퀴즈 불러오기 인증 실패 (quiz={quiz_id}, status={response.status_code})")
            raise InvalidSession("Session expired. Please log in again.")
        if response.is_error:
            message = _server_message(response) or f"HTTP {response.status_code}"
            logger.error(f"퀴즈 불러오기 실패 (quiz={quiz_id}): {message}")
            raise LoadFailed(message)

        try:
            return QuizDefinition.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"퀴즈 데이터 형식 오류 (quiz={quiz_id}): {e}")
            raise LoadFailed("Invalid quiz data received.") from e

    async def submit_attempt(self, token: str, payload: AttemptPayload) -> SubmissionResult:
        try:
            response = await self._client.post(
                "/results/submit",
                json=payload.to_json(),
                headers=_auth_headers(token),
            )
        except httpx.HTTPError as e:
            logger.error(f"답안 제출 네트워크 오류 (quiz={payload.quiz_id}): {e}")
            raise SubmitFailed(SUBMIT_FAILED_MESSAGE) from e

        if response.status_code == 401:
            logger.warning(f"답안 제출 인증 만료 (quiz={payload.quiz_id})")
            raise InvalidSession("Session expired. Please log in again.")
        if response.status_code == 403:
            message = _server_message(response) or ACCESS_DENIED_MESSAGE
            logger.warning(f"답안 제출 거부 (quiz={payload.quiz_id}): {message}")
            raise AccessDenied(message)
        if response.is_error:
            logger.error(f"답안 제출 실패 (quiz={payload.quiz_id}, status={response.status_code})")
            raise SubmitFailed(SUBMIT_FAILED_MESSAGE)

        try:
            return SubmissionResult.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"제출 응답 형식 오류 (quiz={payload.quiz_id}): {e}")
            raise SubmitFailed(SUBMIT_FAILED_MESSAGE) from e
