"""
Assessment data model — one assessment per job, made of ordered questions.
"""

from typing import Literal, Optional
from pydantic import Field, model_validator

from models.base import Record

QuestionType = Literal["multiple-choice", "short-answer", "long-answer", "coding"]


class Question(Record):
    id: str
    text: str
    type: QuestionType
    options: Optional[list[str]] = None
    correct_answer: Optional[str] = None
    time_limit: Optional[int] = Field(default=None, gt=0, description="Minutes")

    @model_validator(mode="after")
    def check_options(self) -> "Question":
        if self.type == "multiple-choice" and not self.options:
            raise ValueError(f"Question {self.id}: multiple-choice questions need options")
        if self.correct_answer is not None and self.options and self.correct_answer not in self.options:
            raise ValueError(f"Question {self.id}: correct answer must be one of the options")
        return self


class Assessment(Record):
    id: str
    job_id: str
    title: str
    description: str = ""
    duration: int = Field(gt=0, description="Minutes")
    passing_score: int = Field(ge=0, le=100)
    questions: list[Question] = Field(default_factory=list)
    created_at: str
    updated_at: str
