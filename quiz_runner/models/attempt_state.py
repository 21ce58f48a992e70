"""
models/attempt_state.py

퀴즈 응시 1회분의 진행 상태 모델.
Pydantic BaseModel 기반 — 컨트롤러 하나가 단독으로 소유하고 변경한다.
UI 코드 없음.
"""

from enum import Enum
from typing import Dict, Optional, Set

from pydantic import BaseModel, Field

from quiz_runner.models.payload import SubmissionResult


class Phase(str, Enum):
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    SUBMITTING = "Submitting"
    COMPLETED = "Completed"
    FAILED = "Failed"


class SubmitReason(str, Enum):
    MANUAL = "manual"
    TIMEOUT = "timeout"
    VIOLATION = "violation"


TERMINAL_PHASES = frozenset({Phase.COMPLETED, Phase.FAILED})


class AttemptState(BaseModel):
    """
    응시 상태 전체를 표현하는 모델.

    Attributes:
        current_index:     현재 보고 있는 문제 인덱스 (0-based).
        mcq_answers:       객관식 답안. {문제 인덱스: 선택한 보기 인덱스}
        written_answers:   서술형 답안. {문제 인덱스: 입력한 텍스트}
        written_seq:       서술형 답안별 마지막으로 반영한 입력 순번. 이보다 오래된 입력은 버린다.
        remaining_seconds: 남은 시간(초). 타이머 동작 중 감소만 한다.
        violation_count:   탭 이탈 횟수. 응시 중 증가만 한다.
        phase:             응시 단계.
        visited:           한 번이라도 표시된 문제 인덱스.
        tab_hidden:        마지막으로 관측된 탭 숨김 여부.
        warning_visible:   탭 이탈 경고 표시 여부.
        submit_reason:     제출 사유 (제출 전에는 None).
        auto_submitted:    시간 초과/이탈 한도로 자동 제출되었는지 여부.
        result:            제출 결과 (Completed 일 때).
        error_message:     제출 실패 메시지 (Failed 일 때).
        reauth_required:   인증 만료로 재로그인이 필요한지 여부.
        load_error:        퀴즈 불러오기 실패 메시지.
    """

    current_index: int = Field(default=0, ge=0)
    mcq_answers: Dict[int, int] = Field(default_factory=dict)
    written_answers: Dict[int, str] = Field(default_factory=dict)
    written_seq: Dict[int, int] = Field(default_factory=dict)
    remaining_seconds: int = 0
    violation_count: int = Field(default=0, ge=0)
    phase: Phase = Phase.NOT_STARTED

    visited: Set[int] = Field(default_factory=set)
    tab_hidden: bool = False
    warning_visible: bool = False
    submit_reason: Optional[SubmitReason] = None
    auto_submitted: bool = False
    result: Optional[SubmissionResult] = None
    error_message: Optional[str] = None
    reauth_required: bool = False
    load_error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES
