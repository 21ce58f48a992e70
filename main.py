"""
main.py — 퀴즈 러너 진입점

사용법:
    python main.py [quiz_id] [--port PORT] [--no-browser]

로컬 API 서버를 띄우고, 준비되면 기본 브라우저로 응시 페이지를 연다.
"""

import argparse
import logging
import socket
import sys
import threading
import time
import webbrowser

import uvicorn

from api.app import create_app
from config import DEFAULT_HOST, DEFAULT_PORT, LOG_FILE, SERVER_START_TIMEOUT

logger = logging.getLogger(__name__)


def _setup_logging() -> None:
    handlers = [logging.StreamHandler(sys.stdout)]
    try:
        handlers.append(logging.FileHandler(LOG_FILE, encoding='utf-8'))
    except OSError:
        # 로그 파일을 열 수 없으면 콘솔 출력만 사용
        pass
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=handlers,
    )


# ── 서버 ─────────────────────────────────────────────────────────────────────

def _pick_port(preferred: int) -> int:
    """preferred 가 비어 있으면 그대로, 아니면 OS 가 고른 빈 포트를 쓴다."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((DEFAULT_HOST, preferred))
        except OSError:
            logger.warning(f"포트 {preferred} 사용 중 → 빈 포트로 대체")
            s.bind((DEFAULT_HOST, 0))
        return s.getsockname()[1]


def _wait_for_server(port: int, timeout: float = SERVER_START_TIMEOUT) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            with socket.create_connection((DEFAULT_HOST, port), timeout=0.5):
                return True
        except OSError:
            time.sleep(0.1)
    return False


def _quiz_url(port: int, quiz_id: str) -> str:
    url = f"http://{DEFAULT_HOST}:{port}/"
    return f"{url}?id={quiz_id}" if quiz_id else url


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Timed quiz runner")
    parser.add_argument("quiz_id", nargs="?", default="", help="quiz to open")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--no-browser", action="store_true", help="only run the local server")
    args = parser.parse_args(argv)

    _setup_logging()
    port = _pick_port(args.port)
    logger.info(f"=== Quiz Runner 시작 (port={port}) ===")

    server = uvicorn.Server(uvicorn.Config(create_app(), host=DEFAULT_HOST, port=port, log_level="warning"))
    thread = threading.Thread(target=server.run, name="quiz-runner-server", daemon=True)
    thread.start()

    if not _wait_for_server(port):
        logger.error(f"{SERVER_START_TIMEOUT:.0f}초 안에 서버가 뜨지 않았습니다.")
        server.should_exit = True
        return 1

    url = _quiz_url(port, args.quiz_id)
    logger.info(f"서버 준비 완료: {url}")
    if not args.no_browser:
        webbrowser.open(url)

    try:
        thread.join()
    except KeyboardInterrupt:
        logger.info("사용자에 의해 종료되었습니다.")
        server.should_exit = True
        thread.join(timeout=5)
    return 0


if __name__ == "__main__":
    sys.exit(main())
