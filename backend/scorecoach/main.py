import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware

from scorecoach.question_pipeline import analyze_report, run_pipeline
from scorecoach.schemas.api_models import (
    QuestionGenerationInput,
    QuestionListResponse,
    ReportAnalysisResponse,
    ReportInput,
)
from scorecoach.settings import get_settings
from scorecoach.utils.fallback_bank import generate_fallback_questions
from scorecoach.utils.report_parser import parse_report

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="scorecoach")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allow_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _resolve_count(count: Optional[int]) -> int:
    if count is None:
        return settings.default_question_count
    if count < 1 or count > settings.max_question_count:
        raise HTTPException(
            status_code=422,
            detail=f"count must be between 1 and {settings.max_question_count}",
        )
    return count


# Routes
@app.get("/", include_in_schema=False)
def root_get():
    return {"ok": True, "service": "scorecoach", "docs": "/docs"}

@app.head("/", include_in_schema=False)
def root_head():
    return Response(status_code=200)

@app.get("/healthz", include_in_schema=False)
def health_get():
    return {"ok": True, "generation_enabled": settings.generation_enabled}

@app.head("/healthz", include_in_schema=False)
def health_head():
    return Response(status_code=200)


@app.post("/reports/analyze", response_model=ReportAnalysisResponse)
def analyze(payload: ReportInput):
    if not payload.report_text.strip():
        raise HTTPException(status_code=400, detail="report_text is empty.")

    analysis = analyze_report(payload.report_text, settings.default_question_count)
    return ReportAnalysisResponse(
        report=analysis.report,
        weak_topics=analysis.weak_topics,
        allocation=analysis.allocation,
        recognized=analysis.recognized,
    )


@app.post("/questions/generate", response_model=QuestionListResponse)
def generate(payload: QuestionGenerationInput):
    count = _resolve_count(payload.count)
    result = run_pipeline(payload.report_text, count)
    logger.info("Returning %d questions (source=%s)", len(result.questions), result.source)
    return QuestionListResponse(
        questions=result.questions,
        count=len(result.questions),
        source=result.source,
    )


@app.post("/questions/fallback", response_model=QuestionListResponse)
def generate_offline(payload: QuestionGenerationInput):
    count = _resolve_count(payload.count)
    if not payload.report_text.strip():
        return QuestionListResponse(questions=[], count=0, source="empty")

    report = parse_report(payload.report_text)
    questions = generate_fallback_questions(report if report.has_data() else None, count)
    return QuestionListResponse(questions=questions, count=len(questions), source="fallback")
