"""
Report text -> practice questions.

generate_questions() always returns exactly `count` questions for non-empty
input. Generation-service output is used when it is available and parseable;
anything missing is made up from the fallback bank, and any failure along the
way diverts the whole call to the fallback bank.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from scorecoach.models.question_models import GeneratedQuestion
from scorecoach.models.report_models import PerformanceReport
from scorecoach.utils.errors import InsufficientResults, QuestionPipelineError
from scorecoach.utils.fallback_bank import generate_fallback_questions
from scorecoach.utils.llm_client import Generator, default_generator
from scorecoach.utils.prompt_templates import allocate_questions, build_generation_request
from scorecoach.utils.report_parser import looks_like_score_report, parse_report
from scorecoach.utils.response_extractor import extract_questions
from scorecoach.utils.weakness import weak_topics_by_section

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 10

# generator argument meaning "use the configured service, if any"
USE_DEFAULT = object()


@dataclass
class PipelineResult:
    questions: List[GeneratedQuestion] = field(default_factory=list)
    # "generated", "mixed", "fallback" or "empty"
    source: str = "empty"
    report: Optional[PerformanceReport] = None


@dataclass
class ReportAnalysis:
    report: PerformanceReport
    weak_topics: Dict[str, List[str]]
    allocation: Dict[str, int]
    recognized: bool


def analyze_report(text: str, count: int = DEFAULT_COUNT) -> ReportAnalysis:
    report = parse_report(text)
    return ReportAnalysis(
        report=report,
        weak_topics=weak_topics_by_section(report),
        allocation=allocate_questions(report, count),
        recognized=looks_like_score_report(text),
    )


def _unique_ids(questions: List[GeneratedQuestion]) -> List[GeneratedQuestion]:
    seen = set()
    out = []
    for q in questions:
        qid = q.id
        n = 1
        while qid in seen:
            n += 1
            qid = f"{q.id}-{n}"
        seen.add(qid)
        out.append(q if qid == q.id else q.model_copy(update={"id": qid}))
    return out


def _require_count(questions: List[GeneratedQuestion], count: int) -> None:
    if len(questions) < count:
        raise InsufficientResults(len(questions), count)


def _generate(report: PerformanceReport, count: int, generator: Generator) -> List[GeneratedQuestion]:
    request = build_generation_request(report, count)
    raw = generator(request.prompt)
    logger.debug("Raw generation response: %s", raw)
    questions = extract_questions(raw)
    if not questions:
        raise InsufficientResults(0, count)
    return questions


def run_pipeline(text: str, count: int = DEFAULT_COUNT, generator=USE_DEFAULT) -> PipelineResult:
    if not text or not text.strip() or count < 1:
        return PipelineResult()

    report = parse_report(text)
    if not report.has_data():
        logger.info("No performance data recognized in report; using topic-agnostic fallback")
        return PipelineResult(generate_fallback_questions(None, count), "fallback", report)

    if generator is USE_DEFAULT:
        generator = default_generator()
    if generator is None:
        return PipelineResult(generate_fallback_questions(report, count), "fallback", report)

    try:
        questions = _generate(report, count, generator)
    except QuestionPipelineError as e:
        logger.warning("Question generation failed (%s); using fallback", e)
        return PipelineResult(generate_fallback_questions(report, count), "fallback", report)
    except Exception:
        logger.exception("Unexpected error during question generation; using fallback")
        return PipelineResult(generate_fallback_questions(report, count), "fallback", report)

    try:
        _require_count(questions, count)
    except InsufficientResults as e:
        logger.info("%s; padding from fallback bank", e.message)
        padding = generate_fallback_questions(report, count - e.produced)
        return PipelineResult(_unique_ids(questions + padding), "mixed", report)

    logger.info("Generated %d questions", count)
    return PipelineResult(_unique_ids(questions[:count]), "generated", report)


def generate_questions(text: str, count: int = DEFAULT_COUNT, generator=USE_DEFAULT) -> List[GeneratedQuestion]:
    return run_pipeline(text, count, generator).questions
