from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Literal, Optional

Difficulty = Literal["Easy", "Medium", "Hard"]


def normalize_difficulty(value: Any) -> Any:
    """'hard' / ' HARD ' -> 'Hard'; anything else is left for validation."""
    if isinstance(value, str):
        cleaned = value.strip().capitalize()
        if cleaned in ("Easy", "Medium", "Hard"):
            return cleaned
    return value


class GeneratedQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique question id")
    text: str = Field(..., description="The question prompt")
    topic: str = Field(..., description="Topic the question practises")
    difficulty: Optional[Difficulty] = None
    options: Optional[List[str]] = Field(
        None,
        min_length=4,
        max_length=4,
        description="Exactly four answer choices for multiple choice"
    )
    answer: Optional[str] = Field(
        None,
        description="Letter A-D for multiple choice, or the exact value"
    )
    explanation: Optional[str] = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def _difficulty(cls, value):
        return normalize_difficulty(value)

    @field_validator("answer", mode="before")
    @classmethod
    def _answer(cls, value):
        # models sometimes send numeric answers for grid-in questions
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class GenerationRequest(BaseModel):
    prompt: str
    count: int
    allocation: Dict[str, int]
    weak_topics: Dict[str, List[str]]
    output_schema: Dict[str, Any]
