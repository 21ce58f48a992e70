"""
views/exam_view.py — 응시 화면 뷰 모델

브라우저 페이지(static/index.html)는 이 함수가 돌려주는 dict 만 보고 화면을 그린다.

레이아웃:
  - 헤더     : 퀴즈 제목 + 타이머
  - 경고     : 탭 이탈 경고 배너
  - 메인 영역 : 현재 문제 카드 + 이전/다음/제출
  - 다이얼로그 : 제출 진행 / 결과
"""

from __future__ import annotations

from quiz_runner.models.attempt_state import Phase
from quiz_runner.services.quiz_session import QuizSession
from quiz_runner.views import result_view
from quiz_runner.views.components import navigation as nav
from quiz_runner.views.components import question_card as qcard
from quiz_runner.views.components import timer as tmr
from quiz_runner.views.components import warning_banner as banner


def render(session: QuizSession) -> dict:
    """응시 화면 전체 렌더링 데이터."""
    state = session.state
    quiz = session.quiz

    view = {
        "phase": state.phase.value,
        "loaded": quiz is not None,
        "load_error": state.load_error,
        "reauth_required": state.reauth_required,
        "title": quiz.title if quiz else "",
        "can_start": quiz is not None and state.phase == Phase.NOT_STARTED,
        "clipboard_blocked": session.monitor_active,
        "timer": tmr.render(state.remaining_seconds, running=state.phase == Phase.IN_PROGRESS),
        "warning": banner.render(state.warning_visible, state.violation_count, session.max_violations),
        "question": None,
        "navigation": None,
        "dialog": result_view.render(state),
    }

    # ── 세션 가드 ──────────────────────────────────────────────────────────
    if quiz is None or state.phase != Phase.IN_PROGRESS:
        return view

    total = len(quiz.questions)
    idx = state.current_index
    view["question"] = qcard.render(
        question=quiz.questions[idx],
        index=idx,
        total=total,
        selected_option=state.mcq_answers.get(idx),
        written_answer=state.written_answers.get(idx, ""),
    )
    answered = len(set(state.mcq_answers) | {i for i, t in state.written_answers.items() if t})
    view["navigation"] = nav.render(idx, total, answered)
    return view
