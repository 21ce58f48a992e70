"""
api/session.py — 멀티유저 인메모리 세션 (쿠키 기반)

각 브라우저에 UUID 세션 ID를 발급하고, 세션별로 인증 토큰과 응시 컨트롤러를 보관.
TTL(기본 1시간) 경과 시 자동 만료.
"""

import threading
import time
import uuid
from typing import Any

from config import SESSION_TTL

_lock = threading.Lock()
_sessions: dict[str, dict[str, Any]] = {}
_timestamps: dict[str, float] = {}
_orphaned: list[Any] = []  # 조회 중 만료되어 아직 정리되지 않은 컨트롤러


def _new_state() -> dict[str, Any]:
    return {
        "token": "",
        "controller": None,
    }


def create_session() -> str:
    """새 세션을 생성하고 세션 ID를 반환."""
    sid = uuid.uuid4().hex
    with _lock:
        _sessions[sid] = _new_state()
        _timestamps[sid] = time.time()
    return sid


def get_session(sid: str) -> dict[str, Any] | None:
    """세션 ID로 세션 데이터를 가져옴. 만료되었거나 없으면 None."""
    with _lock:
        if sid not in _sessions:
            return None
        if time.time() - _timestamps[sid] > SESSION_TTL:
            if _sessions[sid].get("controller") is not None:
                _orphaned.append(_sessions[sid]["controller"])
            del _sessions[sid]
            del _timestamps[sid]
            return None
        _timestamps[sid] = time.time()  # 접근 시 갱신
        return _sessions[sid]


def get(sid: str, key: str, default=None):
    """세션에서 값 읽기."""
    session = get_session(sid)
    if session is None:
        return default
    return session.get(key, default)


def put(sid: str, key: str, value) -> None:
    """세션에 값 쓰기."""
    with _lock:
        if sid in _sessions:
            _sessions[sid][key] = value
            _timestamps[sid] = time.time()


def clear_credential(sid: str) -> None:
    """저장된 인증 토큰 삭제 (인증 만료 시)."""
    put(sid, "token", "")


def reset(sid: str) -> Any:
    """
    세션 초기화 (인증 토큰은 유지).

    Returns:
        정리해야 할 이전 컨트롤러 (없으면 None)
    """
    with _lock:
        if sid not in _sessions:
            return None
        old_controller = _sessions[sid].get("controller")
        saved_token = _sessions[sid].get("token", "")
        _sessions[sid] = _new_state()
        _sessions[sid]["token"] = saved_token
        _timestamps[sid] = time.time()
        return old_controller


def cleanup_expired() -> list[Any]:
    """만료된 세션을 정리. 정리해야 할 컨트롤러 목록 반환."""
    now = time.time()
    with _lock:
        controllers = list(_orphaned)
        _orphaned.clear()
        expired = [sid for sid, ts in _timestamps.items() if now - ts > SESSION_TTL]
        for sid in expired:
            controller = _sessions[sid].get("controller")
            if controller is not None:
                controllers.append(controller)
            del _sessions[sid]
            del _timestamps[sid]
    return controllers
