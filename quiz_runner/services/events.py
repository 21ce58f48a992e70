"""
services/events.py

세션 컨트롤러의 단일 이벤트 큐로 들어가는 이벤트 정의.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from quiz_runner.models.attempt_state import SubmitReason
from quiz_runner.models.payload import SubmissionResult
from quiz_runner.models.quiz_model import QuizDefinition
from quiz_runner.services.quiz_session import Direction


@dataclass(slots=True, frozen=True)
class QuizLoaded:
    quiz: QuizDefinition


@dataclass(slots=True, frozen=True)
class LoadFailedEvent:
    message: str


@dataclass(slots=True, frozen=True)
class StartRequested:
    pass


@dataclass(slots=True, frozen=True)
class Tick:
    pass


@dataclass(slots=True, frozen=True)
class Navigate:
    direction: Direction


@dataclass(slots=True, frozen=True)
class SelectOption:
    question_index: int
    option_index: int


@dataclass(slots=True, frozen=True)
class EditWritten:
    question_index: int
    text: str
    seq: Optional[int] = None


@dataclass(slots=True, frozen=True)
class VisibilityChanged:
    hidden: bool


@dataclass(slots=True, frozen=True)
class SubmitRequested:
    reason: SubmitReason = SubmitReason.MANUAL
    auto: bool = False


@dataclass(slots=True, frozen=True)
class SubmissionSucceeded:
    result: SubmissionResult


@dataclass(slots=True, frozen=True)
class SubmissionRejected:
    """결과 없이 끝난 제출 (접근 거부 또는 일반 실패)."""

    message: str


@dataclass(slots=True, frozen=True)
class SessionExpired:
    pass
