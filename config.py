import os

# 기본 디렉토리 설정
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# 경로 설정
STATIC_DIR = os.path.join(BASE_DIR, "static")
LOG_FILE = os.path.join(BASE_DIR, "launch.log")

# 서버 설정
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("PORT", "8000"))
SERVER_START_TIMEOUT = 15.0

# 퀴즈 백엔드 설정
BACKEND_URL = os.getenv("QUIZ_BACKEND_URL", "http://localhost:5000/api")
REQUEST_TIMEOUT = float(os.getenv("QUIZ_REQUEST_TIMEOUT", "15"))

# 응시 규칙
TICK_INTERVAL = 1.0         # 타이머 1틱 (초)
MAX_VIOLATIONS = 2          # 탭 이탈 허용 한도 (도달 시 자동 제출)
TIMER_WARNING_SECONDS = 60  # 남은 시간 경고 표시 기준

# 세션 설정
SESSION_TTL = int(os.getenv("SESSION_TTL", "3600"))
SESSION_CLEANUP_INTERVAL = 300

# 브라우저 리다이렉트 대상
LOGIN_PAGE = "login.html"
QUIZ_LIST_PAGE = "quiz-progress.html"
