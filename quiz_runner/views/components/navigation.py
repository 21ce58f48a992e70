"""
views/components/navigation.py

이전 / 다음 / 제출 버튼 표시 여부.
첫 문제에서는 이전 버튼을 숨기고, 마지막 문제에서는 다음 대신 제출 버튼을 보인다.
"""


def render(current_index: int, total: int, answered: int) -> dict:
    is_last = current_index >= total - 1
    return {
        "show_prev": current_index > 0,
        "show_next": not is_last,
        "show_submit": is_last,
        "progress_text": f"{current_index + 1} / {total}",
        "answered": answered,
        "total": total,
    }
