"""
services/errors.py

응시 흐름에서 발생하는 오류 분류.
어떤 오류도 자동 재시도하지 않는다.
"""


class QuizRunnerError(Exception):
    """퀴즈 러너 오류의 기반 클래스."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class InvalidSession(QuizRunnerError):
    """401 (불러오기는 403 포함) — 저장된 인증 정보를 지우고 재로그인해야 한다."""


class AccessDenied(QuizRunnerError):
    """제출 시 403 — 서버 메시지를 그대로 보여준다."""


class LoadFailed(QuizRunnerError):
    """퀴즈 불러오기 실패 — 응시를 중단하고 퀴즈 목록으로 돌아간다."""


class SubmitFailed(QuizRunnerError):
    """그 외 제출 실패 (네트워크 오류, 2xx 이외 응답)."""


class QuizNotReady(QuizRunnerError):
    """퀴즈를 불러오기 전에 시작하려고 한 경우."""


class SessionClosed(QuizRunnerError, RuntimeError):
    """이미 닫힌 컨트롤러로 온 요청 (새로 불러오기/초기화로 교체됨)."""
