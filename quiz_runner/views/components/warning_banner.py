"""
views/components/warning_banner.py

탭 이탈 경고 배너. 이탈 횟수와 자동 제출 한도를 함께 보여준다.
"""


def warning_text(violation_count: int, max_violations: int) -> str:
    plural = "s" if violation_count > 1 else ""
    return (
        f"Warning: You switched tabs {violation_count} time{plural}. "
        f"Limit is {max_violations} before auto-submit."
    )


def render(visible: bool, violation_count: int, max_violations: int) -> dict:
    return {
        "visible": visible,
        "violation_count": violation_count,
        "max_violations": max_violations,
        "text": warning_text(violation_count, max_violations) if violation_count else "",
    }
