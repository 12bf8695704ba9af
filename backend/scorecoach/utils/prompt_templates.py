import json
from typing import Dict, List

from scorecoach.models.question_models import GenerationRequest
from scorecoach.models.report_models import PerformanceReport
from scorecoach.utils.taxonomy import SECTION_NAMES, default_topics
from scorecoach.utils.weakness import weak_topics_by_section

QUESTION_OUTPUT_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "required": ["id", "text", "topic"],
        "properties": {
            "id": {"type": "string"},
            "text": {"type": "string"},
            "topic": {"type": "string"},
            "difficulty": {"type": "string", "enum": ["Easy", "Medium", "Hard"]},
            "options": {"type": "array", "items": {"type": "string"}, "minItems": 4, "maxItems": 4},
            "answer": {"type": "string"},
            "explanation": {"type": "string"},
        },
    },
}

EXAMPLE_QUESTION = {
    "id": "q1",
    "text": "If 3x + 7 = 22, what is the value of 6x - 4?",
    "topic": "Algebra",
    "difficulty": "Medium",
    "options": ["A) 11", "B) 26", "C) 30", "D) 34"],
    "answer": "B",
    "explanation": "3x + 7 = 22 gives 3x = 15, so x = 5 and 6x - 4 = 30 - 4 = 26.",
}


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


def allocate_questions(report: PerformanceReport, total: int = 10) -> Dict[str, int]:
    """
    Split `total` questions across sections in proportion to incorrect answers.

    Every section except the one with the most incorrect answers gets
    ceil(incorrect / all_incorrect * total), clamped to what is left; the
    largest section absorbs the remainder so the shares always sum to `total`.
    Sections without incorrect answers get nothing, unless no section has
    any, in which case the questions are split evenly.
    """
    allocation = {section: 0 for section in SECTION_NAMES}
    if total <= 0:
        return allocation

    incorrect = {section: report.section_incorrect(section) for section in SECTION_NAMES}
    all_incorrect = sum(incorrect.values())

    if all_incorrect == 0:
        base, extra = divmod(total, len(SECTION_NAMES))
        for i, section in enumerate(SECTION_NAMES):
            allocation[section] = base + (1 if i < extra else 0)
        return allocation

    # max() keeps the first section on ties
    largest = max(SECTION_NAMES, key=lambda s: incorrect[s])
    remaining = total
    for section in SECTION_NAMES:
        if section == largest or incorrect[section] == 0:
            continue
        share = min(_ceil_div(incorrect[section] * total, all_incorrect), remaining)
        allocation[section] = share
        remaining -= share
    allocation[largest] = remaining
    return allocation


def _format_tallies(report: PerformanceReport) -> str:
    lines = []
    for section in SECTION_NAMES:
        perf = report.sections.get(section)
        if perf is None:
            continue
        lines.append(f"- {section}: {perf.correct} correct, {perf.incorrect} incorrect (of {perf.total})")
    lines.append(
        f"- Overall: {report.total_correct} correct, {report.total_incorrect} incorrect "
        f"(of {report.total_questions})"
    )
    return "\n".join(lines)


def _format_topics(report: PerformanceReport) -> str:
    if not report.topic_difficulty:
        return "No per-topic breakdown was found in the report; treat every topic as Medium difficulty."
    lines = []
    for section in SECTION_NAMES:
        recorded = report.topic_difficulty.get(section, {})
        for topic in default_topics(section):
            info = recorded.get(topic)
            if info:
                lines.append(f"- {section} / {topic}: {info.percentage}% - Difficulty level: {info.difficulty}")
            else:
                lines.append(f"- {section} / {topic}: no data - Difficulty level: Medium")
    return "\n".join(lines)


def _format_mistakes(report: PerformanceReport) -> str:
    lines = []
    for section in SECTION_NAMES:
        perf = report.sections.get(section)
        if not perf:
            continue
        for record in perf.incorrect_questions:
            lines.append(
                f"- {section} question {record.question_number}: "
                f"correct answer {record.correct_answer}, student answered {record.your_answer}"
            )
    return "\n".join(lines) or "No individual incorrect answers were listed."


def _format_plan(allocation: Dict[str, int], weak: Dict[str, List[str]]) -> str:
    lines = []
    for section in SECTION_NAMES:
        n = allocation.get(section, 0)
        if n:
            lines.append(f"- {n} {section} questions focused on: {', '.join(weak[section])}")
    return "\n".join(lines)


def build_generation_request(report: PerformanceReport, count: int = 10) -> GenerationRequest:
    allocation = allocate_questions(report, count)
    weak = weak_topics_by_section(report)
    example = json.dumps(EXAMPLE_QUESTION, indent=2)
    weak_block = "\n".join(f"- {s}: {', '.join(t)}" for s, t in weak.items())

    prompt = f"""
You are an expert SAT tutor writing targeted practice questions for a student.

The student's score report shows:
{_format_tallies(report)}

Topic performance:
{_format_topics(report)}

Questions the student answered incorrectly:
{_format_mistakes(report)}

Weak topics by section:
{weak_block}

Write **exactly** {count} new practice questions distributed like this:
{_format_plan(allocation, weak)}

Requirements for each question object:
- id: A short unique identifier (string).
- text: The full question prompt, including any passage or equation it needs (string).
- topic: One of the topic names listed above (string).
- difficulty: "Easy", "Medium" or "Hard".
- options: Exactly 4 answer choices (array of strings) for multiple choice; omit for student-produced responses.
- answer: The correct letter A-D for multiple choice, or the exact value otherwise (string).
- explanation: A short rationale for the correct answer (string).

Output format must be **exactly** a JSON array of {count} objects, for example:

[
{example},
... {count} total ...
]

Do **not** wrap the array in an outer object or include any commentary.
Return only the raw JSON array.
"""

    return GenerationRequest(
        prompt=prompt,
        count=count,
        allocation=allocation,
        weak_topics=weak,
        output_schema={**QUESTION_OUTPUT_SCHEMA, "minItems": count, "maxItems": count},
    )
