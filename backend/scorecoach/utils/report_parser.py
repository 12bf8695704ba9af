"""
Pattern extraction over score-report text.

parse_report() turns loosely structured report text into a PerformanceReport.
It never raises: anything it cannot recognize is simply left at its default,
and recognized-but-unusable fragments are noted in report.warnings.
"""
import logging
import re
from typing import Dict, List, Optional

from scorecoach.models.report_models import (
    IncorrectQuestionRecord,
    PerformanceReport,
    SectionPerformance,
    TopicDifficultyInfo,
)
from scorecoach.utils.errors import ParseAmbiguity
from scorecoach.utils.taxonomy import (
    SECTION_NAMES,
    Topic,
    canonical_section,
    flexible_pattern,
    section_for_topic,
)
from scorecoach.utils.text_cleaning import clean_report_text

logger = logging.getLogger(__name__)

SCORE_REPORT_MARKERS = [
    r"TOTAL\s+SCORE",
    r"Reading\s+and\s+Writing",
    r"\bMath\b",
    r"Questions\s+Overview",
    r"\bCorrect\s+Answers\b",
]

# "42 Total Questions" or "Total Questions: 42"
_SUMMARY_PATTERNS = {
    "total_questions": [
        r"(\d+)[ \t]+Total[ \t]+Questions\b",
        r"\bTotal[ \t]+Questions[ \t]*:?[ \t]*(\d+)",
    ],
    "total_correct": [
        r"(\d+)[ \t]+Correct[ \t]+Answers\b",
        r"\bCorrect[ \t]+Answers[ \t]*:?[ \t]*(\d+)",
    ],
    "total_incorrect": [
        r"(\d+)[ \t]+Incorrect[ \t]+Answers\b",
        r"\bIncorrect[ \t]+Answers[ \t]*:?[ \t]*(\d+)",
    ],
}

_TOTAL_SCORE_PATTERNS = [
    r"\bTotal\s*Score\s*:?\s*(\d{3,4})\b",
    r"\bYour\s+Total\s+Score\s+is\s+(\d{3,4})\b",
]

_SECTION_ALTERNATION = "|".join(flexible_pattern(name) for name in SECTION_NAMES)
_ANSWER = r"[A-Za-z0-9/.,]+(?:[ \t]+[A-Za-z0-9/.,]+)*?"

# real rows are short; longer lines are never tried against the row patterns
MAX_ROW_LENGTH = 200

# "12 Reading and Writing B C; Incorrect" / "3 Math 3/4 .75; Incorrect"
QUESTION_ROW_RE = re.compile(
    rf"^(?=.*;\s*(?:Correct|Incorrect)\b)\s*(\d+)\s+({_SECTION_ALTERNATION})\s+({_ANSWER})\s+({_ANSWER})\s*;\s*(Correct|Incorrect)\b",
    re.IGNORECASE,
)

# OCR sometimes loses the verdict column: "12 Math B C"
RELAXED_ROW_RE = re.compile(
    rf"^\s*(\d+)\s+({_SECTION_ALTERNATION})\s+([A-D])\s+([A-D])\b",
    re.IGNORECASE,
)

_SECTION_SCORE_RES = {
    name: re.compile(rf"\b{flexible_pattern(name)}\s+Score\s*:?\s*(\d{{3}})\b", re.IGNORECASE)
    for name in SECTION_NAMES
}

_TOPIC_RES = {
    topic.value: re.compile(
        rf"{flexible_pattern(topic.value)}\s*\(\s*(\d{{1,3}})\s*%[^)]*\)"
        r"(?:\s*\[?\s*Difficulty\s+level\s*:?\s*(Easy|Medium|Hard)\s*\]?)?",
        re.IGNORECASE,
    )
    for topic in Topic
}


def looks_like_score_report(text: str) -> bool:
    if not text:
        return False
    return sum(1 for m in SCORE_REPORT_MARKERS if re.search(m, text, re.I)) >= 2


def _pick_int(text: str, patterns: List[str]) -> Optional[int]:
    for pat in patterns:
        m = re.search(pat, text, re.I)
        if m:
            return int(m.group(1))
    return None


def _topic_difficulty(text: str, warnings: List[str]) -> Dict[str, Dict[str, TopicDifficultyInfo]]:
    found: Dict[str, Dict[str, TopicDifficultyInfo]] = {}
    for topic, pattern in _TOPIC_RES.items():
        section = section_for_topic(topic)
        for m in pattern.finditer(text):
            try:
                percentage = int(m.group(1))
                if percentage > 100:
                    raise ParseAmbiguity(f"{topic}: percentage {percentage}% is out of range")
            except ParseAmbiguity as e:
                warnings.append(str(e))
                continue
            difficulty = (m.group(2) or "Medium").capitalize()
            # later annotations for the same topic replace earlier ones
            found.setdefault(section, {})[topic] = TopicDifficultyInfo(
                percentage=percentage, difficulty=difficulty
            )
    return found


def _tally_rows(lines: List[str], sections: Dict[str, SectionPerformance]) -> int:
    matched = 0
    for line in lines:
        if len(line) > MAX_ROW_LENGTH:
            continue
        m = QUESTION_ROW_RE.match(line)
        if not m:
            continue
        number, label, correct_answer, your_answer, verdict = m.groups()
        perf = sections[canonical_section(label)]
        perf.total += 1
        if verdict.lower() == "correct":
            perf.correct += 1
        else:
            perf.incorrect += 1
            perf.incorrect_questions.append(IncorrectQuestionRecord(
                question_number=number,
                correct_answer=correct_answer.strip(),
                your_answer=your_answer.strip(),
            ))
        matched += 1
    return matched


def _tally_relaxed_rows(lines: List[str], sections: Dict[str, SectionPerformance]) -> int:
    matched = 0
    for line in lines:
        if len(line) > MAX_ROW_LENGTH:
            continue
        m = RELAXED_ROW_RE.match(line)
        if not m:
            continue
        number, label, correct_answer, your_answer = m.groups()
        perf = sections[canonical_section(label)]
        perf.total += 1
        if correct_answer.upper() == your_answer.upper():
            perf.correct += 1
        else:
            perf.incorrect += 1
            perf.incorrect_questions.append(IncorrectQuestionRecord(
                question_number=number,
                correct_answer=correct_answer.upper(),
                your_answer=your_answer.upper(),
            ))
        matched += 1
    return matched


def parse_report(report_text: Optional[str]) -> PerformanceReport:
    text = clean_report_text(report_text or "")
    warnings: List[str] = []
    sections = {name: SectionPerformance() for name in SECTION_NAMES}

    if not text:
        return PerformanceReport(sections=sections)

    # 1) summary counters
    counters = {key: _pick_int(text, pats) for key, pats in _SUMMARY_PATTERNS.items()}

    # 2) scaled scores
    total_score = _pick_int(text, _TOTAL_SCORE_PATTERNS)
    section_scores = {}
    for name, pattern in _SECTION_SCORE_RES.items():
        m = pattern.search(text)
        if m:
            section_scores[name] = int(m.group(1))

    # 3) topic difficulty annotations
    topic_difficulty = _topic_difficulty(text, warnings)

    # 4) question rows
    lines = text.split("\n")
    rows = _tally_rows(lines, sections)
    if rows == 0:
        rows = _tally_relaxed_rows(lines, sections)
        if rows:
            warnings.append(f"{rows} question rows had no Correct/Incorrect verdict; scored by comparing answers")
    logger.debug("Parsed %d question rows", rows)

    report = PerformanceReport(
        sections=sections,
        total_questions=counters["total_questions"] or 0,
        total_correct=counters["total_correct"] or 0,
        total_incorrect=counters["total_incorrect"] or 0,
        topic_difficulty=topic_difficulty,
        total_score=total_score,
        section_scores=section_scores,
        warnings=warnings,
    )

    # 5) derive totals from the rows when the summary was missing
    if report.total_questions == 0:
        report.total_correct = sum(s.correct for s in report.sections.values())
        report.total_incorrect = sum(s.incorrect for s in report.sections.values())
        report.total_questions = sum(s.total for s in report.sections.values())
    elif (
        counters["total_correct"] is not None
        and counters["total_incorrect"] is not None
        and report.total_questions != report.total_correct + report.total_incorrect
    ):
        report.warnings.append(
            f"Summary counts disagree: {report.total_questions} total vs "
            f"{report.total_correct} correct + {report.total_incorrect} incorrect"
        )

    return report
