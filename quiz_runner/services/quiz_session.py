"""
services/quiz_session.py

퀴즈 응시 상태 머신.
순수 Python 클래스 — 네트워크/타이머/UI 없음. 모든 전이는 AttemptState 하나에 대해 일어난다.

단계 전이:
  NotStarted → InProgress → Submitting → Completed | Failed
  Completed / Failed 는 종료 상태로, 어떤 이벤트도 상태를 바꾸지 않는다.
"""

import logging
from enum import Enum
from typing import Optional

from config import MAX_VIOLATIONS
from quiz_runner.models.attempt_state import AttemptState, Phase, SubmitReason
from quiz_runner.models.payload import AnswerEntry, AttemptPayload, SubmissionResult
from quiz_runner.models.quiz_model import QuizDefinition
from quiz_runner.services.errors import QuizNotReady

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    PREV = "prev"
    NEXT = "next"


class QuizSession:
    """
    응시 1회분의 상태 전이를 담당한다.

    비동기 컨트롤러(session_controller)가 이벤트를 하나씩 직렬로 넘겨준다는
    전제에서 동작하므로 내부 잠금이 없다.
    """

    def __init__(self, max_violations: int = MAX_VIOLATIONS) -> None:
        self.quiz: Optional[QuizDefinition] = None
        self.state = AttemptState()
        self.max_violations = max_violations

    # ── 불러오기 / 시작 ──────────────────────────────────────────────────────

    @property
    def is_loaded(self) -> bool:
        return self.quiz is not None

    @property
    def monitor_active(self) -> bool:
        """타이머와 탭 이탈 감시는 응시 중에만 붙어 있다."""
        return self.state.phase == Phase.IN_PROGRESS

    def load(self, quiz: QuizDefinition) -> None:
        if self.state.phase != Phase.NOT_STARTED:
            logger.warning(f"응시가 이미 시작되어 퀴즈를 다시 불러올 수 없습니다 (phase={self.state.phase.value})")
            return
        self.quiz = quiz
        self.state.remaining_seconds = quiz.duration_seconds
        self.state.load_error = None
        logger.info(f"퀴즈 불러오기 완료: {quiz.id} ({len(quiz.questions)}문제, {quiz.duration_minutes}분)")

    def mark_load_failed(self, message: str) -> None:
        self.state.load_error = message

    def start(self) -> bool:
        """
        응시를 시작한다.

        Returns:
            True  — NotStarted → InProgress 전이
            False — 이미 시작된 응시 (변화 없음)

        Raises:
            QuizNotReady: 퀴즈를 아직 불러오지 못한 경우
        """
        if self.quiz is None:
            raise QuizNotReady("Quiz data not loaded. Please refresh the page.")
        if self.state.phase != Phase.NOT_STARTED:
            return False

        self.state.phase = Phase.IN_PROGRESS
        self.state.current_index = 0
        self.state.visited.add(0)
        logger.info(f"응시 시작: {self.quiz.id}")
        return True

    # ── 문제 이동 ────────────────────────────────────────────────────────────

    def navigate(self, direction: Direction) -> int:
        """이전/다음 문제로 이동한다. 양 끝에서는 제자리. 현재 인덱스를 반환."""
        if self.state.phase != Phase.IN_PROGRESS:
            return self.state.current_index

        last = len(self.quiz.questions) - 1
        idx = self.state.current_index
        if direction == Direction.PREV and idx > 0:
            idx -= 1
        elif direction == Direction.NEXT and idx < last:
            idx += 1

        self.state.current_index = idx
        self.state.visited.add(idx)
        return idx

    # ── 답안 기록 ────────────────────────────────────────────────────────────

    def _check_answerable(self, question_index: int, expected_type: str) -> bool:
        if self.state.phase != Phase.IN_PROGRESS:
            return False
        if not (0 <= question_index < len(self.quiz.questions)):
            raise ValueError(f"존재하지 않는 문제 번호입니다: {question_index}")
        if question_index not in self.state.visited:
            raise ValueError(f"아직 표시되지 않은 문제입니다: {question_index}")
        if self.quiz.questions[question_index].question_type != expected_type:
            raise ValueError(f"{question_index}번 문제는 {expected_type} 유형이 아닙니다.")
        return True

    def record_mcq(self, question_index: int, option_index: int) -> bool:
        """객관식 답안 기록. 같은 문제의 이전 선택은 덮어쓴다."""
        if not self._check_answerable(question_index, "mcq"):
            return False
        options = self.quiz.questions[question_index].options
        if not (0 <= option_index < len(options)):
            raise ValueError(f"존재하지 않는 보기입니다: {option_index}")
        self.state.mcq_answers[question_index] = option_index
        return True

    def record_written(self, question_index: int, text: str, seq: Optional[int] = None) -> bool:
        """
        서술형 답안 기록. 입력이 바뀔 때마다 호출되며 항상 최신 텍스트로 덮어쓴다.

        seq 가 주어지면 같은 문제에 이미 반영된 순번 이하의 입력은 늦게 도착한 것으로 보고 버린다.
        """
        if not self._check_answerable(question_index, "written"):
            return False
        if seq is not None:
            last = self.state.written_seq.get(question_index)
            if last is not None and seq <= last:
                logger.debug(f"오래된 서술형 입력 무시: 문제 {question_index}, 순번 {seq} <= {last}")
                return False
            self.state.written_seq[question_index] = seq
        self.state.written_answers[question_index] = text
        return True

    # ── 타이머 / 탭 이탈 감시 ────────────────────────────────────────────────

    def tick(self) -> bool:
        """
        1초 경과 처리.

        먼저 1초를 깎은 뒤 0 미만인지 확인한다.
        따라서 마지막으로 보이는 값은 0:00 이고, 그 다음 틱에서 만료된다.

        Returns:
            True — 이번 틱에서 시간이 만료되어 자동 제출을 시작해야 함
        """
        if self.state.phase != Phase.IN_PROGRESS:
            return False
        self.state.remaining_seconds -= 1
        return self.state.remaining_seconds < 0

    def set_visibility(self, hidden: bool) -> bool:
        """
        탭 숨김/표시 신호 처리.

        숨김으로 바뀔 때만 1회 증가하며, 표시로 바뀌면 경고만 내린다.

        Returns:
            True — 이탈 한도에 도달하여 자동 제출을 시작해야 함
        """
        if not self.monitor_active:
            return False

        if not hidden:
            self.state.tab_hidden = False
            self.state.warning_visible = False
            return False

        if self.state.tab_hidden:
            return False

        self.state.tab_hidden = True
        self.state.violation_count += 1
        self.state.warning_visible = True
        logger.info(f"탭 이탈 감지: {self.state.violation_count}/{self.max_violations}")
        return self.state.violation_count >= self.max_violations

    # ── 제출 ─────────────────────────────────────────────────────────────────

    def time_taken(self) -> int:
        return self.quiz.duration_seconds - max(self.state.remaining_seconds, 0)

    def build_payload(self) -> AttemptPayload:
        answers = [
            AnswerEntry(
                question_index=i,
                selected_answer=self.state.mcq_answers.get(i),
                written_answer=self.state.written_answers.get(i, ""),
                time_spent=0,
            )
            for i in range(len(self.quiz.questions))
        ]
        return AttemptPayload(
            quiz_id=self.quiz.id,
            answers=answers,
            time_taken=self.time_taken(),
        )

    def begin_submit(self, reason: SubmitReason, auto: bool = False) -> Optional[AttemptPayload]:
        """
        InProgress → Submitting 전이 후 제출 페이로드를 만든다.

        그 외 단계에서는 아무것도 하지 않고 None 을 반환한다 (중복 제출 방지).
        """
        if self.state.phase != Phase.IN_PROGRESS:
            logger.info(f"제출 무시 (phase={self.state.phase.value}, reason={reason.value})")
            return None

        self.state.phase = Phase.SUBMITTING
        self.state.submit_reason = reason
        self.state.auto_submitted = auto
        self.state.warning_visible = False
        logger.info(f"답안 제출 시작: reason={reason.value}, auto={auto}")
        return self.build_payload()

    def complete(self, result: SubmissionResult) -> None:
        if self.state.phase != Phase.SUBMITTING:
            return
        self.state.result = result
        self.state.phase = Phase.COMPLETED

    def fail(self, message: str) -> None:
        if self.state.phase != Phase.SUBMITTING:
            return
        self.state.error_message = message
        self.state.phase = Phase.FAILED

    def require_reauth(self) -> None:
        """인증 만료. Failed 로 가지 않고 재로그인 요청만 표시한다."""
        self.state.reauth_required = True
