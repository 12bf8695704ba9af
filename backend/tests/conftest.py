import pytest

from scorecoach.settings import get_settings

SAMPLE_REPORT = """
Your Total Score is 1210
Reading and Writing Score: 610
Math Score: 600
Questions Overview
42 Total Questions
30 Correct Answers
12 Incorrect Answers
Information and Ideas (72%) Difficulty level: Medium
Craft and Structure (55%) Difficulty level: Hard
Algebra (40%) Difficulty level: Hard
Geometry and Trigonometry (80%) Difficulty level: Easy
1 Reading and Writing B C; Incorrect
2 Reading and Writing A A; Correct
3 Math 3/4 .75; Incorrect
4 Math D D; Correct
5 Math B A; Incorrect
"""


@pytest.fixture
def sample_report_text():
    return SAMPLE_REPORT


@pytest.fixture(autouse=True)
def no_generation_service(monkeypatch):
    """Tests never talk to a real generation service."""
    monkeypatch.setenv("OPENAI_API_KEY", "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
