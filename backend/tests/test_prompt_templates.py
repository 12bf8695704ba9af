import pytest

from scorecoach.models.report_models import PerformanceReport, SectionPerformance
from scorecoach.utils.prompt_templates import allocate_questions, build_generation_request
from scorecoach.utils.report_parser import parse_report

RW, MATH = "Reading and Writing", "Math"


def _report(rw_incorrect, math_incorrect):
    return PerformanceReport(sections={
        RW: SectionPerformance(incorrect=rw_incorrect, total=rw_incorrect),
        MATH: SectionPerformance(incorrect=math_incorrect, total=math_incorrect),
    })


@pytest.mark.parametrize("rw, math, total, expected", [
    (3, 7, 10, {RW: 3, MATH: 7}),
    (1, 2, 10, {RW: 4, MATH: 6}),
    (2, 2, 10, {RW: 5, MATH: 5}),
    (0, 4, 10, {RW: 0, MATH: 10}),
    (1, 5, 1, {RW: 1, MATH: 0}),
    (0, 0, 10, {RW: 5, MATH: 5}),
    (0, 0, 3, {RW: 2, MATH: 1}),
])
def test_allocation(rw, math, total, expected):
    assert allocate_questions(_report(rw, math), total) == expected


@pytest.mark.parametrize("rw", range(0, 12, 3))
@pytest.mark.parametrize("math", range(0, 12, 4))
@pytest.mark.parametrize("total", [1, 2, 7, 10, 25])
def test_allocation_always_sums_to_total(rw, math, total):
    allocation = allocate_questions(_report(rw, math), total)
    assert sum(allocation.values()) == total
    assert all(n >= 0 for n in allocation.values())
    if rw + math:
        # a section nobody missed a question in gets nothing
        assert all(allocation[s] == 0 for s, n in ((RW, rw), (MATH, math)) if n == 0)


def test_allocation_of_nothing():
    assert allocate_questions(_report(3, 3), 0) == {RW: 0, MATH: 0}


def test_generation_request(sample_report_text):
    request = build_generation_request(parse_report(sample_report_text), 10)

    assert request.count == 10
    assert request.allocation == {RW: 4, MATH: 6}
    assert request.weak_topics == {RW: ["Craft and Structure"], MATH: ["Algebra"]}
    assert request.output_schema["type"] == "array"
    assert request.output_schema["minItems"] == request.output_schema["maxItems"] == 10

    prompt = request.prompt
    assert "exactly** 10" in prompt
    assert "JSON array" in prompt
    assert "Craft and Structure: 55% - Difficulty level: Hard" in prompt
    assert "Math question 3: correct answer 3/4, student answered .75" in prompt
    assert "6 Math questions focused on: Algebra" in prompt


def test_generation_request_without_topic_breakdown():
    request = build_generation_request(parse_report("1 Math A B; Incorrect"), 5)
    assert request.allocation == {RW: 0, MATH: 5}
    assert "No per-topic breakdown" in request.prompt
