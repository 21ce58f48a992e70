"""
services/session_controller.py

퀴즈 응시 컨트롤러 (asyncio).

구조:
  - 이벤트 큐 하나 + 소비 태스크 하나 → QuizSession 상태 머신을 직렬로 갱신
  - 이벤트 생산자 두 개: 1초 타이머 태스크, 브라우저가 보내는 탭 표시 여부 신호
  - 제출은 별도 전달 태스크가 백엔드를 한 번 호출하고 결과를 다시 큐로 보낸다

설계 원칙:
- 상태 변경은 오직 소비 태스크 안에서만 일어난다 (핸들러 간 상호 배제)
- 제출 요청은 한 번 보내면 취소하지 않는다
- 실패는 자동 재시도하지 않고 상태(Failed)로 노출한다
"""

import asyncio
import contextlib
import logging
from typing import Any, Callable, Optional

from config import MAX_VIOLATIONS, TICK_INTERVAL
from quiz_runner.models.attempt_state import AttemptState, SubmitReason
from quiz_runner.models.payload import AttemptPayload
from quiz_runner.models.quiz_model import QuizDefinition
from quiz_runner.services.errors import AccessDenied, InvalidSession, LoadFailed, SessionClosed, SubmitFailed
from quiz_runner.services.events import (
    EditWritten,
    LoadFailedEvent,
    Navigate,
    QuizLoaded,
    SelectOption,
    SessionExpired,
    StartRequested,
    SubmissionRejected,
    SubmissionSucceeded,
    SubmitRequested,
    Tick,
    VisibilityChanged,
)
from quiz_runner.services.quiz_client import QuizApiClient
from quiz_runner.services.quiz_session import Direction, QuizSession

logger = logging.getLogger(__name__)

SUBMISSION_FAILED_MESSAGE = "There was an error saving your results. Please contact support."


class QuizSessionController:
    """
    응시 1회분을 소유하는 컨트롤러.

    Args:
        quiz_id:            응시할 퀴즈 ID
        token:              백엔드 bearer 인증 토큰
        client:             QuizApiClient (여러 컨트롤러가 공유 가능)
        on_invalid_session: 인증 만료 시 저장된 인증 정보를 지우는 콜백
        tick_interval:      타이머 간격(초). None 이면 타이머 태스크를 띄우지 않는다 (수동 Tick).
        max_violations:     탭 이탈 허용 한도
    """

    def __init__(
        self,
        quiz_id: str,
        token: str,
        client: QuizApiClient,
        on_invalid_session: Optional[Callable[[], None]] = None,
        tick_interval: Optional[float] = TICK_INTERVAL,
        max_violations: int = MAX_VIOLATIONS,
    ) -> None:
        self.quiz_id = quiz_id
        self._token = token
        self._client = client
        self._on_invalid_session = on_invalid_session
        self._tick_interval = tick_interval

        self.session = QuizSession(max_violations=max_violations)
        self._events: asyncio.Queue = asyncio.Queue()
        self._consumer: Optional[asyncio.Task] = None
        self._ticker: Optional[asyncio.Task] = None
        self._delivery: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def state(self) -> AttemptState:
        return self.session.state

    @property
    def quiz(self) -> Optional[QuizDefinition]:
        return self.session.quiz

    # ── 이벤트 큐 ────────────────────────────────────────────────────────────

    def _ensure_consumer(self) -> None:
        if self._consumer is None or self._consumer.done():
            self._consumer = asyncio.create_task(self._consume(), name=f"quiz-session-{self.quiz_id}")

    def post(self, event: Any) -> None:
        """이벤트를 큐에 넣고 처리 결과는 기다리지 않는다."""
        if self._closed:
            logger.debug(f"닫힌 세션으로 온 이벤트 무시: {event!r}")
            return
        self._ensure_consumer()
        self._events.put_nowait((event, None))

    async def send(self, event: Any) -> Any:
        """이벤트를 큐에 넣고 처리가 끝날 때까지 기다린다. 핸들러 예외는 그대로 전달된다."""
        if self._closed:
            raise SessionClosed("이미 종료된 응시 세션입니다.")
        self._ensure_consumer()
        future = asyncio.get_running_loop().create_future()
        self._events.put_nowait((event, future))
        return await future

    async def _consume(self) -> None:
        while True:
            event, future = await self._events.get()
            try:
                outcome = self._handle(event)
            except Exception as e:
                if future is not None and not future.done():
                    future.set_exception(e)
                else:
                    logger.exception(f"이벤트 처리 중 오류: {event!r}")
            else:
                if future is not None and not future.done():
                    future.set_result(outcome)
            finally:
                self._events.task_done()

    def _handle(self, event: Any) -> Any:
        session = self.session

        if isinstance(event, Tick):
            if session.tick():
                logger.info("제한 시간 종료 → 자동 제출")
                return self._begin_submit(SubmitReason.TIMEOUT, auto=True)
            return False

        if isinstance(event, VisibilityChanged):
            if session.set_visibility(event.hidden):
                logger.info("탭 이탈 한도 도달 → 자동 제출")
                return self._begin_submit(SubmitReason.VIOLATION, auto=True)
            return False

        if isinstance(event, Navigate):
            return session.navigate(event.direction)

        if isinstance(event, SelectOption):
            return session.record_mcq(event.question_index, event.option_index)

        if isinstance(event, EditWritten):
            return session.record_written(event.question_index, event.text, event.seq)

        if isinstance(event, SubmitRequested):
            return self._begin_submit(event.reason, auto=event.auto)

        if isinstance(event, StartRequested):
            started = session.start()
            if started:
                self._start_ticker()
            return started

        if isinstance(event, QuizLoaded):
            session.load(event.quiz)
            return True

        if isinstance(event, LoadFailedEvent):
            session.mark_load_failed(event.message)
            return False

        if isinstance(event, SubmissionSucceeded):
            session.complete(event.result)
            logger.info(f"제출 완료: status={event.result.result.status}")
            return True

        if isinstance(event, SubmissionRejected):
            session.fail(event.message)
            logger.warning(f"제출 실패: {event.message}")
            return False

        if isinstance(event, SessionExpired):
            session.require_reauth()
            self._clear_credential()
            return False

        raise TypeError(f"알 수 없는 이벤트: {event!r}")

    # ── 타이머 ───────────────────────────────────────────────────────────────

    def _start_ticker(self) -> None:
        if self._tick_interval is None:
            return
        self._ticker = asyncio.create_task(self._run_ticker(), name=f"quiz-timer-{self.quiz_id}")

    def _stop_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    async def _run_ticker(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            self.post(Tick())

    # ── 제출 ─────────────────────────────────────────────────────────────────

    def _begin_submit(self, reason: SubmitReason, auto: bool) -> bool:
        payload = self.session.begin_submit(reason, auto=auto)
        if payload is None:
            return False
        self._stop_ticker()
        self._delivery = asyncio.create_task(self._deliver(payload), name=f"quiz-submit-{self.quiz_id}")
        return True

    async def _deliver(self, payload: AttemptPayload) -> None:
        try:
            result = await self._client.submit_attempt(self._token, payload)
        except InvalidSession:
            self.post(SessionExpired())
        except AccessDenied as e:
            self.post(SubmissionRejected(e.message))
        except SubmitFailed:
            self.post(SubmissionRejected(SUBMISSION_FAILED_MESSAGE))
        except Exception:
            logger.exception(f"제출 중 예기치 않은 오류 (quiz={self.quiz_id})")
            self.post(SubmissionRejected(SUBMISSION_FAILED_MESSAGE))
        else:
            self.post(SubmissionSucceeded(result))

    def _clear_credential(self) -> None:
        self._token = ""
        if self._on_invalid_session is not None:
            self._on_invalid_session()

    # ── 공개 API ─────────────────────────────────────────────────────────────

    async def load(self) -> QuizDefinition:
        """
        퀴즈를 불러와 시작 가능 상태로 만든다.

        Raises:
            InvalidSession: 401/403 — 인증 정보를 지운 뒤 다시 던진다
            LoadFailed:     그 외 오류 — 메시지를 기록한 뒤 다시 던진다
        """
        try:
            quiz = await self._client.fetch_quiz(self.quiz_id, self._token)
        except InvalidSession:
            await self.send(SessionExpired())
            raise
        except LoadFailed as e:
            await self.send(LoadFailedEvent(e.message))
            raise
        await self.send(QuizLoaded(quiz))
        return quiz

    async def start(self) -> bool:
        return await self.send(StartRequested())

    async def navigate(self, direction: Direction) -> int:
        return await self.send(Navigate(direction))

    async def select_option(self, question_index: int, option_index: int) -> bool:
        return await self.send(SelectOption(question_index, option_index))

    async def edit_written(self, question_index: int, text: str, seq: Optional[int] = None) -> bool:
        return await self.send(EditWritten(question_index, text, seq))

    async def set_visibility(self, hidden: bool) -> bool:
        return await self.send(VisibilityChanged(hidden))

    async def tick(self) -> bool:
        return await self.send(Tick())

    async def submit(self, reason: SubmitReason = SubmitReason.MANUAL, auto: bool = False) -> bool:
        return await self.send(SubmitRequested(reason, auto))

    async def drain(self) -> None:
        """큐에 쌓인 이벤트와 진행 중인 제출이 모두 처리될 때까지 기다린다."""
        await self._events.join()
        if self._delivery is not None:
            await self._delivery
            await self._events.join()

    async def close(self) -> None:
        """타이머와 소비 태스크를 멈춘다. 진행 중인 제출은 끝까지 둔다."""
        self._closed = True
        self._stop_ticker()
        if self._consumer is not None:
            self._consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer
            self._consumer = None
        self._fail_pending()

    def _fail_pending(self) -> None:
        # 소비 태스크가 멈춘 뒤 큐에 남은 요청은 처리되지 않으므로 기다리는 쪽을 깨운다
        while True:
            try:
                event, future = self._events.get_nowait()
            except asyncio.QueueEmpty:
                break
            if future is not None and not future.done():
                future.set_exception(SessionClosed("이미 종료된 응시 세션입니다."))
            else:
                logger.debug(f"종료된 세션에서 버려진 이벤트: {event!r}")
            self._events.task_done()
