import json

import pytest

from scorecoach import question_pipeline
from scorecoach.question_pipeline import analyze_report, generate_questions, run_pipeline
from scorecoach.utils.errors import GenerationServiceError


def _questions_json(n, prefix="gen"):
    return json.dumps([
        {"id": f"{prefix}-{i}", "text": f"Question {i}", "topic": "Algebra", "difficulty": "Medium"}
        for i in range(n)
    ])


class RecordingGenerator:
    def __init__(self, response):
        self.response = response
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        return self.response


def _raise(exc):
    def generator(prompt):
        raise exc
    return generator


def test_empty_input_yields_nothing():
    assert generate_questions("", 10) == []
    assert generate_questions("   \n", 10) == []
    assert run_pipeline("", 10).source == "empty"


def test_non_positive_count_yields_nothing(sample_report_text):
    assert generate_questions(sample_report_text, 0) == []
    assert generate_questions(sample_report_text, -3) == []


def test_unrecognized_text_without_service_still_fills_count():
    questions = generate_questions("some report text", 10)
    assert len(questions) == 10
    assert len({q.id for q in questions}) == 10


def test_unrecognized_text_skips_the_service():
    generator = RecordingGenerator(_questions_json(10))
    result = run_pipeline("some report text", 10, generator)
    assert result.source == "fallback"
    assert generator.prompts == []


def test_no_generator_uses_fallback(sample_report_text):
    result = run_pipeline(sample_report_text, 10, generator=None)
    assert result.source == "fallback"
    assert len(result.questions) == 10
    assert result.report.total_questions == 42


def test_default_generator_is_disabled_without_api_key(sample_report_text):
    result = run_pipeline(sample_report_text, 6)
    assert result.source == "fallback"
    assert len(result.questions) == 6


def test_full_generation(sample_report_text):
    generator = RecordingGenerator(_questions_json(10))
    result = run_pipeline(sample_report_text, 10, generator)
    assert result.source == "generated"
    assert [q.id for q in result.questions] == [f"gen-{i}" for i in range(10)]
    prompt = generator.prompts[0]
    assert "Craft and Structure" in prompt
    assert "exactly** 10" in prompt


def test_excess_questions_are_truncated(sample_report_text):
    result = run_pipeline(sample_report_text, 4, RecordingGenerator(_questions_json(9)))
    assert result.source == "generated"
    assert [q.id for q in result.questions] == ["gen-0", "gen-1", "gen-2", "gen-3"]


def test_short_response_is_padded(sample_report_text):
    result = run_pipeline(sample_report_text, 10, RecordingGenerator(_questions_json(3)))
    assert result.source == "mixed"
    assert len(result.questions) == 10
    assert [q.id for q in result.questions[:3]] == ["gen-0", "gen-1", "gen-2"]
    assert len({q.id for q in result.questions}) == 10


def test_duplicate_ids_are_made_unique(sample_report_text):
    response = json.dumps([
        {"id": "q1", "text": "First", "topic": "Algebra"},
        {"id": "q1", "text": "Second", "topic": "Algebra"},
        {"id": "q1", "text": "Third", "topic": "Algebra"},
    ])
    result = run_pipeline(sample_report_text, 3, RecordingGenerator(response))
    assert [q.id for q in result.questions] == ["q1", "q1-2", "q1-3"]
    assert [q.text for q in result.questions] == ["First", "Second", "Third"]


@pytest.mark.parametrize("generator", [
    _raise(GenerationServiceError("timed out")),
    _raise(RuntimeError("boom")),
    RecordingGenerator("I cannot produce questions right now."),
    RecordingGenerator("[]"),
    RecordingGenerator(json.dumps(["not a question", 3])),
])
def test_failures_fall_back(sample_report_text, generator):
    result = run_pipeline(sample_report_text, 10, generator)
    assert result.source == "fallback"
    assert len(result.questions) == 10


def test_default_generator_is_used_when_configured(sample_report_text, monkeypatch):
    generator = RecordingGenerator(_questions_json(5))
    monkeypatch.setattr(question_pipeline, "default_generator", lambda: generator)
    questions = generate_questions(sample_report_text, 5)
    assert [q.id for q in questions] == [f"gen-{i}" for i in range(5)]
    assert len(generator.prompts) == 1


def test_analyze_report(sample_report_text):
    analysis = analyze_report(sample_report_text, 10)
    assert analysis.recognized
    assert analysis.allocation == {"Reading and Writing": 4, "Math": 6}
    assert analysis.weak_topics["Math"] == ["Algebra"]
    assert analysis.report.total_score == 1210


def test_fallback_content_is_reproducible():
    first = generate_questions("some report text", 10)
    second = generate_questions("some report text", 10)
    # ids carry a timestamp; everything else is identical
    assert [q.model_dump(exclude={"id"}) for q in first] == [q.model_dump(exclude={"id"}) for q in second]
    assert all(q.id and q.text and q.topic for q in first)


def test_question_with_bad_options_is_kept_and_padded(sample_report_text):
    response = json.dumps([{"id": "x", "text": "t", "topic": "Algebra", "options": ["A"]}])
    result = run_pipeline(sample_report_text, 10, RecordingGenerator(response))
    assert result.source == "mixed"
    assert len(result.questions) == 10
    assert result.questions[0].id == "x"
    assert result.questions[0].options is None
