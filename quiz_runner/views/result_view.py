"""
views/result_view.py — 제출 진행 / 결과 다이얼로그

표시 내용:
  - 자동 제출 안내 (시간 초과 또는 탭 이탈 한도)
  - 제출 중 안내
  - 채점 대기 (서술형 포함 퀴즈)
  - 점수 (score / totalQuestions)
  - 제출 실패
"""

from __future__ import annotations

from typing import Optional

from quiz_runner.models.attempt_state import AttemptState, Phase, SubmitReason

PENDING_MESSAGE = "Your responses are saved. Results will be declared in 8-10 hours."

_AUTO_SUBMIT_MESSAGES = {
    SubmitReason.TIMEOUT: "Time's up! Your answers are being submitted automatically.",
    SubmitReason.VIOLATION: "You left the quiz tab too many times. Your answers are being submitted automatically.",
}


def _format_score(score: Optional[float]) -> str:
    if score is None:
        return "-"
    return str(int(score)) if float(score).is_integer() else f"{score:.1f}"


def render(state: AttemptState) -> Optional[dict]:
    """
    현재 단계에 맞는 다이얼로그 데이터. 응시 전/중에는 None.

    Returns:
        {"kind": ..., "title": ..., "message": ..., "auto_submitted": bool}
    """
    if state.phase in (Phase.NOT_STARTED, Phase.IN_PROGRESS):
        return None

    dialog = {"auto_submitted": state.auto_submitted}

    if state.phase == Phase.SUBMITTING:
        if state.reauth_required:
            dialog.update(kind="reauth", title="Session expired", message="Please log in again.")
        elif state.auto_submitted:
            dialog.update(
                kind="auto_submit",
                title="Quiz Auto-Submitted",
                message=_AUTO_SUBMIT_MESSAGES.get(state.submit_reason, "Submitting..."),
            )
        else:
            dialog.update(
                kind="submitting",
                title="Submitting...",
                message="Please wait while we save your answers.",
            )
        return dialog

    if state.phase == Phase.COMPLETED:
        grade = state.result.result
        if grade.is_pending:
            dialog.update(kind="pending", title="Quiz Submitted!", message=PENDING_MESSAGE)
        else:
            dialog.update(
                kind="graded",
                title="Quiz Submitted!",
                message=f"Your score: {_format_score(grade.score)} / {grade.total_questions}",
                score=grade.score,
                total_questions=grade.total_questions,
            )
        return dialog

    # ── Failed ────────────────────────────────────────────────────────────
    dialog.update(kind="failed", title="Submission Failed!", message=state.error_message or "")
    return dialog
