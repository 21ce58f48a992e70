"""
views/components/timer.py

남은 응시 시간을 M:SS 형식으로 렌더링하는 컴포넌트.
"""

from config import TIMER_WARNING_SECONDS


def format_remaining(remaining_seconds: int) -> str:
    """
    남은 초를 M:SS 문자열로 변환한다 (분은 그대로, 초는 2자리).

    만료 직후의 음수 값은 0:00 으로 표시한다.
    """
    remaining = max(0, remaining_seconds)
    minutes, seconds = divmod(remaining, 60)
    return f"{minutes}:{seconds:02d}"


def render(remaining_seconds: int, running: bool) -> dict:
    """
    타이머 표시 정보.

    Returns:
        {"text": "M:SS", "warning": 경고 색상 여부, "running": 카운트다운 중 여부}
    """
    return {
        "text": format_remaining(remaining_seconds),
        "warning": running and remaining_seconds < TIMER_WARNING_SECONDS,
        "running": running,
    }
