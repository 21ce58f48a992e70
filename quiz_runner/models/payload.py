"""
models/payload.py

제출 API 요청/응답 모델.
백엔드와 주고받는 JSON은 camelCase 를 쓴다.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnswerEntry(_CamelModel):
    """문제 하나에 대한 제출 답안."""

    question_index: int
    selected_answer: Optional[int] = None
    written_answer: str = ""
    time_spent: int = 0


class AttemptPayload(_CamelModel):
    """POST /results/submit 요청 본문."""

    quiz_id: str
    answers: List[AnswerEntry]
    time_taken: int

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class GradeResult(_CamelModel):
    """
    채점 결과.

    status 가 'pending' 이면 점수가 아직 없다 (서술형 수동 채점 대기).
    그 외에는 score / total_questions 가 채워진다.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    status: str = Field(..., description="pending | graded")
    score: Optional[float] = None
    total_questions: Optional[int] = None

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"


class SubmissionResult(BaseModel):
    """POST /results/submit 응답 본문: {"result": {...}}"""

    model_config = ConfigDict(extra="ignore")

    result: GradeResult
