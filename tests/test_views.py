from conftest import make_quiz
from quiz_runner.models.attempt_state import Phase, SubmitReason
from quiz_runner.models.payload import SubmissionResult
from quiz_runner.services.quiz_session import Direction, QuizSession
from quiz_runner.views import exam_view, result_view
from quiz_runner.views.components import navigation, timer, warning_banner


def test_timer_format():
    assert timer.format_remaining(60) == "1:00"
    assert timer.format_remaining(61) == "1:01"
    assert timer.format_remaining(9) == "0:09"
    assert timer.format_remaining(0) == "0:00"
    assert timer.format_remaining(-1) == "0:00"
    assert timer.format_remaining(3600) == "60:00"


def test_navigation_buttons():
    first = navigation.render(0, 3, answered=0)
    assert not first["show_prev"] and first["show_next"] and not first["show_submit"]

    last = navigation.render(2, 3, answered=1)
    assert last["show_prev"] and not last["show_next"] and last["show_submit"]


def test_warning_text():
    assert warning_banner.warning_text(1, 2) == \
        "Warning: You switched tabs 1 time. Limit is 2 before auto-submit."
    assert "2 times" in warning_banner.warning_text(2, 2)


def _session(question_types=("mcq", "written")):
    session = QuizSession()
    session.load(make_quiz(question_types))
    return session


def test_exam_view_before_start():
    view = exam_view.render(_session())
    assert view["phase"] == "NotStarted"
    assert view["can_start"]
    assert view["timer"]["text"] == "1:00"
    assert view["question"] is None
    assert view["dialog"] is None


def test_exam_view_restores_answers():
    session = _session()
    session.start()
    session.record_mcq(0, 1)
    session.navigate(Direction.NEXT)
    session.record_written(1, "my answer")
    session.set_visibility(True)

    view = exam_view.render(session)
    assert view["question"]["number_text"] == "Question 2 of 2"
    assert view["question"]["written_answer"] == "my answer"
    assert view["warning"]["visible"]
    assert view["warning"]["violation_count"] == 1
    assert view["clipboard_blocked"]
    assert view["navigation"]["answered"] == 2

    session.navigate(Direction.PREV)
    options = exam_view.render(session)["question"]["options"]
    assert [o["selected"] for o in options] == [False, True, False]
    assert [o["label"] for o in options] == ["A", "B", "C"]


def test_dialogs():
    session = _session()
    session.start()
    session.begin_submit(SubmitReason.TIMEOUT, auto=True)
    assert result_view.render(session.state)["kind"] == "auto_submit"

    session.complete(SubmissionResult.model_validate(
        {"result": {"status": "graded", "score": 1.0, "totalQuestions": 2}}
    ))
    dialog = result_view.render(session.state)
    assert dialog["kind"] == "graded"
    assert dialog["message"] == "Your score: 1 / 2"

    pending = _session()
    pending.start()
    pending.begin_submit(SubmitReason.MANUAL)
    assert result_view.render(pending.state)["kind"] == "submitting"
    pending.complete(SubmissionResult.model_validate({"result": {"status": "pending"}}))
    assert result_view.render(pending.state)["message"] == result_view.PENDING_MESSAGE

    failed = _session()
    failed.start()
    failed.begin_submit(SubmitReason.MANUAL)
    failed.fail("Access denied.")
    dialog = result_view.render(failed.state)
    assert dialog["kind"] == "failed"
    assert dialog["message"] == "Access denied."
    assert failed.state.phase == Phase.FAILED
