"""
models/quiz_model.py

백엔드에서 받아오는 퀴즈 정의 모델.
Pydantic v2 적용 — 한 번 받아오면 변경하지 않는다(frozen).
"""

from typing import List, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class Option(BaseModel):
    """객관식 보기. 보기의 식별자는 리스트 안의 인덱스다."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    text: str = Field(..., description="보기 내용")


class Question(BaseModel):
    """
    퀴즈 문제 모델

    questionType 이 'mcq' 이면 options 가 필요하고,
    'written' 이면 보기 없이 서술형 답안을 받는다.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    question_type: Literal["mcq", "written"] = Field(
        ...,
        validation_alias=AliasChoices("questionType", "question_type"),
        description="문제 유형 (mcq | written)"
    )
    question_text: str = Field(
        ...,
        validation_alias=AliasChoices("questionText", "question_text"),
        description="발문/문제 내용"
    )
    options: List[Option] = Field(
        default_factory=list,
        description="보기 리스트 (객관식만 해당)"
    )

    @model_validator(mode='after')
    def validate_mcq_options(self) -> 'Question':
        """객관식 문제는 보기가 최소 1개 이상 있어야 한다."""
        if self.question_type == "mcq" and not self.options:
            raise ValueError("객관식 문제(mcq)에 보기(options)가 없습니다.")
        return self

    @property
    def is_mcq(self) -> bool:
        return self.question_type == "mcq"


class QuizDefinition(BaseModel):
    """
    응시 대상 퀴즈 전체 정의.

    백엔드 문서 스토어의 `_id`, 이전 필드명 `duration` 도 그대로 받는다.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str = Field(
        ...,
        validation_alias=AliasChoices("id", "_id"),
        description="퀴즈 식별자"
    )
    title: str = Field(default="", description="퀴즈 제목")
    duration_minutes: int = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("durationMinutes", "duration", "duration_minutes"),
        description="제한 시간 (분)"
    )
    questions: List[Question] = Field(..., description="문제 리스트 (순서 유지)")

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v

    @field_validator('questions')
    @classmethod
    def validate_questions_not_empty(cls, v: List[Question]) -> List[Question]:
        """문제가 하나도 없으면 응시할 수 없다."""
        if not v:
            raise ValueError("퀴즈에 문제가 없습니다.")
        return v

    @property
    def duration_seconds(self) -> int:
        return self.duration_minutes * 60
