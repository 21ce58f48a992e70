"""
api/routes.py — FastAPI 엔드포인트
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, model_validator

import api.session as session
from config import LOGIN_PAGE, QUIZ_LIST_PAGE
from quiz_runner.services.errors import InvalidSession, LoadFailed, QuizNotReady
from quiz_runner.services.quiz_session import Direction
from quiz_runner.services.session_controller import QuizSessionController
from quiz_runner.views import exam_view

logger = logging.getLogger(__name__)

router = APIRouter()

# ── Pydantic request bodies ──────────────────────────────────────────────────

class CredentialBody(BaseModel):
    token: str

class NavigateBody(BaseModel):
    direction: Direction

class AnswerBody(BaseModel):
    question_index: int
    option_index: Optional[int] = None
    text: Optional[str] = None
    seq: Optional[int] = None

    @model_validator(mode='after')
    def exactly_one_answer(self) -> 'AnswerBody':
        if (self.option_index is None) == (self.text is None):
            raise ValueError("option_index 와 text 중 하나만 보내야 합니다.")
        return self

class VisibilityBody(BaseModel):
    hidden: bool


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

def _sid(request: Request) -> str:
    return request.state.session_id


def _reauth_error() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"message": "Session expired. Please log in again.", "redirect": LOGIN_PAGE},
    )


def _controller(request: Request) -> QuizSessionController:
    controller: QuizSessionController = session.get(_sid(request), "controller")
    if controller is None:
        raise HTTPException(status_code=404, detail="No quiz session. Load a quiz first.")
    return controller


def _view(controller: QuizSessionController) -> dict:
    return exam_view.render(controller.session)


# ── 엔드포인트 ───────────────────────────────────────────────────────────────

@router.get("/api/health")
async def health():
    return {"status": "OK", "message": "Quiz runner is running"}


@router.post("/api/credential")
async def set_credential(body: CredentialBody, request: Request):
    token = body.token.strip()
    if not token:
        raise HTTPException(status_code=400, detail="Token is empty.")
    session.put(_sid(request), "token", token)
    return {"ok": True}


@router.post("/api/quiz/{quiz_id}/load")
async def load_quiz(quiz_id: str, request: Request):
    sid = _sid(request)
    token = session.get(sid, "token", "")
    if not token:
        raise _reauth_error()

    old = session.reset(sid)
    if old is not None:
        await old.close()

    controller = QuizSessionController(
        quiz_id=quiz_id,
        token=token,
        client=request.app.state.quiz_client,
        on_invalid_session=lambda: session.clear_credential(sid),
    )
    session.put(sid, "controller", controller)

    try:
        await controller.load()
    except InvalidSession:
        raise _reauth_error()
    except LoadFailed as e:
        logger.error(f"퀴즈 불러오기 실패 (quiz={quiz_id}): {e.message}")
        raise HTTPException(
            status_code=502,
            detail={"message": f"Error: {e.message}. Redirecting...", "redirect": QUIZ_LIST_PAGE},
        )
    return _view(controller)


@router.post("/api/start")
async def start_quiz(request: Request):
    controller = _controller(request)
    try:
        await controller.start()
    except QuizNotReady as e:
        raise HTTPException(status_code=409, detail=e.message)
    return _view(controller)


@router.post("/api/navigate")
async def navigate(body: NavigateBody, request: Request):
    controller = _controller(request)
    await controller.navigate(body.direction)
    return _view(controller)


@router.post("/api/answer")
async def save_answer(body: AnswerBody, request: Request):
    controller = _controller(request)
    try:
        if body.option_index is not None:
            await controller.select_option(body.question_index, body.option_index)
        else:
            await controller.edit_written(body.question_index, body.text, body.seq)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _view(controller)


@router.post("/api/visibility")
async def visibility(body: VisibilityBody, request: Request):
    controller = _controller(request)
    await controller.set_visibility(body.hidden)
    return _view(controller)


@router.post("/api/submit")
async def submit_quiz(request: Request):
    controller = _controller(request)
    await controller.submit()
    return _view(controller)


@router.get("/api/state")
async def get_state(request: Request):
    return _view(_controller(request))


@router.post("/api/reset")
async def reset_session(request: Request):
    old = session.reset(_sid(request))
    if old is not None:
        await old.close()
    return {"ok": True}
