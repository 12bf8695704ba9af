import pytest

from scorecoach.utils.fallback_bank import (
    FALLBACK_TEMPLATES,
    TEMPLATE_KEYS,
    generate_fallback_questions,
    templates_for,
)
from scorecoach.utils.report_parser import parse_report
from scorecoach.utils.taxonomy import SECTION_TOPICS

TS = 1700000000000


def test_bank_covers_every_topic():
    expected = {(s, t) for s, topics in SECTION_TOPICS.items() for t in topics}
    assert set(FALLBACK_TEMPLATES) == expected
    for templates in FALLBACK_TEMPLATES.values():
        assert len(templates) >= 3
        for q in templates:
            assert q.text and q.answer and q.explanation
            if q.options is not None:
                assert len(q.options) == 4
                assert q.answer in "ABCD"


def test_template_ids_are_unique():
    ids = [q.id for templates in FALLBACK_TEMPLATES.values() for q in templates]
    assert len(ids) == len(set(ids))


def test_templates_for_unknown_topic():
    assert templates_for("Math", "Poetry") == ()
    assert templates_for("Science", "Algebra") == ()
    assert templates_for("Math", "Algebra")


@pytest.mark.parametrize("count", [1, 7, 10, 33, 50])
def test_exact_count_and_unique_ids(sample_report_text, count):
    questions = generate_fallback_questions(parse_report(sample_report_text), count, timestamp=TS)
    assert len(questions) == count
    assert len({q.id for q in questions}) == count


def test_weak_topics_come_first(sample_report_text):
    questions = generate_fallback_questions(parse_report(sample_report_text), 10, timestamp=TS)
    # Math has the most incorrect answers; its only weak topic is Algebra
    assert [q.id for q in questions[:3]] == [
        f"math-alg-1-{TS}-0",
        f"math-alg-2-{TS}-1",
        f"rw-craft-1-{TS}-2",
    ]


def test_first_weak_topic_takes_its_full_quota():
    rows = "\n".join(f"{n} Math A B; Incorrect" for n in range(1, 8))
    rows += "\n" + "\n".join(f"{n} Reading and Writing A B; Incorrect" for n in range(8, 11))
    questions = generate_fallback_questions(parse_report(rows), 10, timestamp=TS)
    # Math: 7 of 10 allocated, 7 incorrect, every topic weak
    assert [q.topic for q in questions] == ["Algebra"] * 7 + ["Advanced Math"] * 3
    assert [q.id for q in questions[:5]] == [
        f"math-alg-1-{TS}-0",
        f"math-alg-2-{TS}-1",
        f"math-alg-3-{TS}-2",
        f"math-alg-4-{TS}-3",
        f"math-alg-1-{TS}-4",
    ]


def test_quota_is_capped_by_section_incorrect():
    rows = "1 Math A B; Incorrect\n2 Math C D; Incorrect\n3 Math A A; Correct"
    questions = generate_fallback_questions(parse_report(rows), 6, timestamp=TS)
    # two incorrect answers and no Hard topic: two picks per default topic until full
    assert [q.topic for q in questions] == [
        "Algebra", "Algebra",
        "Advanced Math", "Advanced Math",
        "Problem-Solving and Data Analysis", "Problem-Solving and Data Analysis",
    ]

def test_deterministic_for_same_timestamp(sample_report_text):
    report = parse_report(sample_report_text)
    first = generate_fallback_questions(report, 12, timestamp=TS)
    second = generate_fallback_questions(report, 12, timestamp=TS)
    assert first == second


def test_without_report_cycles_every_topic():
    questions = generate_fallback_questions(None, 10, timestamp=TS)
    assert len(questions) == 10
    first_pass = [q.topic for q in questions[:len(TEMPLATE_KEYS)]]
    assert first_pass == [topic.value for _, topic in TEMPLATE_KEYS]
    assert questions[8].id == f"rw-info-2-{TS}-8"


def test_zero_count():
    assert generate_fallback_questions(None, 0) == []


def test_back_to_back_calls_never_share_ids(monkeypatch):
    from scorecoach.utils import fallback_bank

    # both calls land in the same millisecond
    monkeypatch.setattr(fallback_bank.time, "time", lambda: 1700000000.0)
    first = {q.id for q in generate_fallback_questions(None, 10)}
    second = {q.id for q in generate_fallback_questions(None, 10)}
    assert len(first) == len(second) == 10
    assert first.isdisjoint(second)
