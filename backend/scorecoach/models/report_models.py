from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from scorecoach.models.question_models import Difficulty


class IncorrectQuestionRecord(BaseModel):
    question_number: str
    correct_answer: str
    your_answer: str


class SectionPerformance(BaseModel):
    correct: int = 0
    incorrect: int = 0
    total: int = 0
    incorrect_questions: List[IncorrectQuestionRecord] = []


class TopicDifficultyInfo(BaseModel):
    percentage: int = Field(..., ge=0, le=100)
    difficulty: Difficulty = "Medium"


class PerformanceReport(BaseModel):
    sections: Dict[str, SectionPerformance] = {}
    total_correct: int = 0
    total_incorrect: int = 0
    total_questions: int = 0
    # section -> topic -> info; empty when the report has no topic breakdown
    topic_difficulty: Dict[str, Dict[str, TopicDifficultyInfo]] = {}
    total_score: Optional[int] = None
    section_scores: Dict[str, int] = {}
    warnings: List[str] = []

    def has_data(self) -> bool:
        return self.total_questions > 0 or any(s.total > 0 for s in self.sections.values())

    def section_incorrect(self, section: str) -> int:
        perf = self.sections.get(section)
        return perf.incorrect if perf else 0

    def topic_info(self, section: str, topic: str) -> Optional[TopicDifficultyInfo]:
        return self.topic_difficulty.get(section, {}).get(topic)
