"""
views/components/question_card.py

현재 문제(Question)를 카드 형태로 표시하기 위한 데이터를 만든다.
저장된 답안을 함께 돌려주어 다시 방문했을 때 선택/입력이 복원되도록 한다.
"""

from __future__ import annotations

from typing import Optional

from quiz_runner.models.quiz_model import Question


def _option_label(i: int) -> str:
    return chr(ord("A") + i)


def render(
    question: Question,
    index: int,
    total: int,
    selected_option: Optional[int] = None,
    written_answer: str = "",
) -> dict:
    """
    문제 카드 렌더링 데이터.

    Args:
        question:        표시할 Question 객체
        index:           문제 인덱스 (0-based)
        total:           전체 문제 수
        selected_option: 이미 저장된 객관식 선택 (없으면 None)
        written_answer:  이미 저장된 서술형 답안 (없으면 "")
    """
    card = {
        "index": index,
        "number_text": f"Question {index + 1} of {total}",
        "question_type": question.question_type,
        "question_text": question.question_text,
    }

    if question.is_mcq:
        card["options"] = [
            {
                "index": i,
                "label": _option_label(i),
                "text": opt.text,
                "selected": i == selected_option,
            }
            for i, opt in enumerate(question.options)
        ]
    else:
        card["written_answer"] = written_answer

    return card
