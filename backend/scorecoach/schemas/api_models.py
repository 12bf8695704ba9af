from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional

from scorecoach.models.question_models import GeneratedQuestion
from scorecoach.models.report_models import PerformanceReport


class ReportInput(BaseModel):
    report_text: str = Field(..., description="Raw text copied or OCR'd from a score report")


class QuestionGenerationInput(BaseModel):
    report_text: str
    count: Optional[int] = None  # defaults to DEFAULT_QUESTION_COUNT


class ReportAnalysisResponse(BaseModel):
    report: PerformanceReport
    weak_topics: Dict[str, List[str]]
    allocation: Dict[str, int]
    recognized: bool


class QuestionListResponse(BaseModel):
    questions: List[GeneratedQuestion]
    count: int
    source: Literal["generated", "mixed", "fallback", "empty"]
