"""
api/app.py — FastAPI 앱 인스턴스 + 세션 미들웨어 + static 파일 서빙
"""

import asyncio
import contextlib
import logging
import os
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse, JSONResponse

from config import SESSION_CLEANUP_INTERVAL, SESSION_TTL, STATIC_DIR
from api.routes import router
import api.session as session
from quiz_runner.services.errors import SessionClosed
from quiz_runner.services.quiz_client import QuizApiClient

SESSION_COOKIE = "quiz_runner_session"

logger = logging.getLogger(__name__)


async def _cleanup_loop() -> None:
    """만료 세션 주기적 정리 (5분마다). 남아 있던 컨트롤러의 타이머도 멈춘다."""
    while True:
        await asyncio.sleep(SESSION_CLEANUP_INTERVAL)
        controllers = session.cleanup_expired()
        for controller in controllers:
            await controller.close()
        if controllers:
            logger.info(f"만료 세션 컨트롤러 {len(controllers)}개 정리")


def create_app(quiz_client: Optional[QuizApiClient] = None) -> FastAPI:
    client = quiz_client or QuizApiClient()

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        cleanup = asyncio.create_task(_cleanup_loop())
        try:
            yield
        finally:
            cleanup.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await cleanup
            await client.aclose()

    app = FastAPI(title="Quiz Runner", docs_url=None, redoc_url=None, lifespan=lifespan)
    app.state.quiz_client = client

    # CORS (모바일 브라우저 등 다양한 출처 허용)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 세션 미들웨어: 쿠키에서 세션 ID를 읽고, 없으면 새로 발급
    @app.middleware("http")
    async def session_middleware(request: Request, call_next):
        sid = request.cookies.get(SESSION_COOKIE)
        if not sid or session.get_session(sid) is None:
            sid = session.create_session()

        request.state.session_id = sid
        response: Response = await call_next(request)
        response.set_cookie(
            key=SESSION_COOKIE,
            value=sid,
            httponly=True,
            samesite="lax",
            max_age=SESSION_TTL,
        )
        return response

    # 새로 불러오기/초기화로 교체된 컨트롤러에 늦게 도착한 요청
    @app.exception_handler(SessionClosed)
    async def session_closed_handler(request: Request, exc: SessionClosed):
        return JSONResponse(status_code=409, content={"detail": exc.message})

    app.include_router(router)

    # static 파일 마운트
    if os.path.isdir(STATIC_DIR):
        app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    # 루트 → index.html
    @app.get("/")
    async def serve_index():
        index_path = os.path.join(STATIC_DIR, "index.html")
        if os.path.exists(index_path):
            return FileResponse(index_path)
        return {"error": "index.html not found"}

    return app
