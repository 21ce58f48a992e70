import asyncio

import pytest

from conftest import FakeBackend, quiz_json
from quiz_runner.models.attempt_state import Phase, SubmitReason
from quiz_runner.services.errors import InvalidSession, LoadFailed, QuizNotReady, SessionClosed
from quiz_runner.services.quiz_session import Direction
from quiz_runner.services.session_controller import (
    SUBMISSION_FAILED_MESSAGE,
    QuizSessionController,
)


def make_controller(backend, cleared=None, tick_interval=None):
    return QuizSessionController(
        quiz_id="quiz-1",
        token="secret",
        client=backend.client(),
        on_invalid_session=(lambda: cleared.append(True)) if cleared is not None else None,
        tick_interval=tick_interval,
    )


async def _loaded_and_started(controller):
    await controller.load()
    await controller.start()


def test_end_to_end_manual_submit():
    backend = FakeBackend()

    async def scenario():
        controller = make_controller(backend)
        await _loaded_and_started(controller)
        for _ in range(5):
            await controller.tick()
        await controller.select_option(0, 1)
        await controller.navigate(Direction.NEXT)
        await controller.select_option(1, 0)
        assert await controller.submit() is True
        await controller.drain()
        await controller.close()
        return controller

    controller = asyncio.run(scenario())

    assert backend.submit_headers == ["Bearer secret"]
    body = backend.submissions[0]
    assert body["answers"] == [
        {"questionIndex": 0, "selectedAnswer": 1, "writtenAnswer": "", "timeSpent": 0},
        {"questionIndex": 1, "selectedAnswer": 0, "writtenAnswer": "", "timeSpent": 0},
    ]
    assert body["timeTaken"] == 5
    assert controller.state.phase == Phase.COMPLETED
    assert controller.state.result.result.score == 2


def test_second_submit_while_submitting_sends_nothing():
    backend = FakeBackend()
    backend.hold_submit = True

    async def scenario():
        controller = make_controller(backend)
        await _loaded_and_started(controller)
        assert await controller.submit() is True
        await asyncio.sleep(0)
        assert await controller.submit() is False
        assert await controller.set_visibility(True) is False
        assert controller.state.phase == Phase.SUBMITTING
        while backend._release is None:
            await asyncio.sleep(0)
        backend.release()
        await controller.drain()
        await controller.close()
        return controller

    controller = asyncio.run(scenario())

    assert len(backend.submissions) == 1
    assert controller.state.phase == Phase.COMPLETED
    assert controller.state.violation_count == 0


def test_timeout_submits_exactly_once():
    backend = FakeBackend()

    async def scenario():
        controller = make_controller(backend)
        await _loaded_and_started(controller)
        results = [await controller.tick() for _ in range(60)]
        assert not any(results)
        assert controller.state.remaining_seconds == 0
        assert await controller.tick() is True
        assert await controller.tick() is False
        await controller.drain()
        await controller.close()
        return controller

    controller = asyncio.run(scenario())

    assert len(backend.submissions) == 1
    assert backend.submissions[0]["timeTaken"] == 60
    assert controller.state.submit_reason == SubmitReason.TIMEOUT
    assert controller.state.auto_submitted


def test_violation_limit_auto_submits():
    backend = FakeBackend()

    async def scenario():
        controller = make_controller(backend)
        await _loaded_and_started(controller)
        await controller.set_visibility(True)
        await controller.set_visibility(False)
        await controller.set_visibility(True)
        await controller.drain()
        await controller.close()
        return controller

    controller = asyncio.run(scenario())

    assert controller.state.violation_count == 2
    assert controller.state.submit_reason == SubmitReason.VIOLATION
    assert len(backend.submissions) == 1


def test_single_violation_does_not_submit():
    backend = FakeBackend()

    async def scenario():
        controller = make_controller(backend)
        await _loaded_and_started(controller)
        await controller.set_visibility(True)
        await controller.drain()
        await controller.close()
        return controller

    controller = asyncio.run(scenario())

    assert controller.state.phase == Phase.IN_PROGRESS
    assert backend.submissions == []


def test_background_timer_drives_countdown():
    backend = FakeBackend()

    async def scenario():
        controller = make_controller(backend, tick_interval=0.001)
        await _loaded_and_started(controller)
        for _ in range(5000):
            if controller.state.phase != Phase.IN_PROGRESS:
                break
            await asyncio.sleep(0.001)
        await controller.drain()
        await controller.close()
        return controller

    controller = asyncio.run(scenario())

    assert controller.state.phase == Phase.COMPLETED
    assert controller.state.submit_reason == SubmitReason.TIMEOUT
    assert len(backend.submissions) == 1


def test_start_before_load_raises():
    backend = FakeBackend()

    async def scenario():
        controller = make_controller(backend)
        with pytest.raises(QuizNotReady):
            await controller.start()
        await controller.close()

    asyncio.run(scenario())


@pytest.mark.parametrize("status", [401, 403])
def test_load_rejected_clears_credential(status):
    backend = FakeBackend(quiz_status=status)
    cleared = []

    async def scenario():
        controller = make_controller(backend, cleared=cleared)
        with pytest.raises(InvalidSession):
            await controller.load()
        await controller.close()
        return controller

    controller = asyncio.run(scenario())

    assert cleared == [True]
    assert controller.state.reauth_required


def test_load_error_keeps_server_message():
    backend = FakeBackend(quiz_status=404, quiz_body={"message": "Quiz not found"})

    async def scenario():
        controller = make_controller(backend)
        with pytest.raises(LoadFailed) as exc:
            await controller.load()
        await controller.close()
        return controller, exc.value

    controller, error = asyncio.run(scenario())

    assert error.message == "Quiz not found"
    assert controller.state.load_error == "Quiz not found"
    assert controller.quiz is None


def _submit_with(backend, cleared=None):
    async def scenario():
        controller = make_controller(backend, cleared=cleared)
        await _loaded_and_started(controller)
        await controller.submit()
        await controller.drain()
        await controller.close()
        return controller

    return asyncio.run(scenario())


def test_submit_401_requests_reauth_without_failing():
    cleared = []
    controller = _submit_with(FakeBackend(submit_status=401, submit_body={"message": "expired"}), cleared)

    assert cleared == [True]
    assert controller.state.reauth_required
    assert controller.state.phase == Phase.SUBMITTING


def test_submit_403_fails_with_server_message():
    controller = _submit_with(FakeBackend(submit_status=403, submit_body={"message": "Quiz already attempted"}))

    assert controller.state.phase == Phase.FAILED
    assert controller.state.error_message == "Quiz already attempted"


def test_submit_server_error_fails_generically():
    controller = _submit_with(FakeBackend(submit_status=500, submit_body={"message": "db down"}))

    assert controller.state.phase == Phase.FAILED
    assert controller.state.error_message == SUBMISSION_FAILED_MESSAGE


def test_pending_result_completes():
    backend = FakeBackend(
        quiz=quiz_json(("written",)),
        submit_body={"result": {"status": "pending"}},
    )
    controller = _submit_with(backend)

    assert controller.state.phase == Phase.COMPLETED
    assert controller.state.result.result.is_pending
    assert backend.submissions[0]["answers"][0]["writtenAnswer"] == ""
    assert backend.submissions[0]["answers"][0]["selectedAnswer"] is None


def test_close_fails_requests_still_queued():
    async def scenario():
        controller = make_controller(FakeBackend())
        await _loaded_and_started(controller)
        queued = asyncio.create_task(controller.navigate(Direction.NEXT))
        await asyncio.sleep(0)
        await controller.close()
        done, _ = await asyncio.wait({queued}, timeout=1.0)
        await asyncio.wait_for(controller.drain(), timeout=1.0)
        return queued, done

    queued, done = asyncio.run(scenario())

    assert queued in done
    assert isinstance(queued.exception(), SessionClosed)
