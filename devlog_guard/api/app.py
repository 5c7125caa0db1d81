"""
HTTP surface for the generation pipeline and budget administration.
"""

from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from devlog_guard.api.schemas import ErrorBody, GenerateBody
from devlog_guard.config.loader import GuardConfig, load_guard_config
from devlog_guard.core.admission import AdmissionRejected, AdmissionStatus, client_id_from_headers
from devlog_guard.core.generation import TextGenerator, UpstreamError
from devlog_guard.core.ledger import MONTH_PATTERN, UsageLedger
from devlog_guard.core.pipeline import GenerationPipeline, build_pipeline
from devlog_guard.observability.logger import setup_logging
from devlog_guard.sdk.openai_client import OpenAIGenerator

UPSTREAM_MESSAGES = {
    "timeout": "Generation took too long. Please try again.",
    "upstream_busy": "The generation service is busy. Please try again shortly.",
    "misconfiguration": "The generation service is not configured correctly.",
}


def create_app(
    config: Optional[GuardConfig] = None,
    generator: Optional[TextGenerator] = None,
    ledger: Optional[UsageLedger] = None,
) -> FastAPI:
    """Build the application with one set of guard services for its lifetime."""
    setup_logging()
    config = config or load_guard_config()
    if generator is None:
        generator = OpenAIGenerator(
            model=config.model.name,
            temperature=config.model.temperature,
            timeout=config.model.timeout_seconds,
        )
    pipeline = build_pipeline(config, generator, ledger=ledger)

    app = FastAPI(title="DevLog Guard", version="0.1.0")
    app.state.pipeline = pipeline

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "ok"}

    @app.post("/api/generate")
    def generate(body: GenerateBody, request: Request):
        pipeline: GenerationPipeline = app.state.pipeline
        client_id = client_id_from_headers(request.headers)
        try:
            response = pipeline.run(body.to_request(), client_id)
        except AdmissionRejected as e:
            return _rejection_response(e)
        except UpstreamError as e:
            return JSONResponse(
                status_code=e.http_status,
                content=ErrorBody(
                    error=e.category,
                    message=UPSTREAM_MESSAGES.get(e.category, "Generation failed."),
                ).model_dump(exclude_none=True),
            )
        return JSONResponse(status_code=200, content=response.to_dict())

    @app.get("/api/admin/budget")
    def budget_status():
        pipeline: GenerationPipeline = app.state.pipeline
        return pipeline.ledger.get_budget_status().to_dict()

    @app.post("/api/admin/budget/reset")
    def budget_reset(month: Optional[str] = Query(default=None, pattern=MONTH_PATTERN)):
        pipeline: GenerationPipeline = app.state.pipeline
        pipeline.ledger.reset_monthly_usage(month)
        return {
            "message": "Monthly usage has been reset",
            "budget_status": pipeline.ledger.get_budget_status().to_dict(),
        }

    return app


def _rejection_response(error: AdmissionRejected) -> JSONResponse:
    decision = error.decision
    if decision.status == AdmissionStatus.RATE_LIMITED:
        rate = decision.rate_limit
        return JSONResponse(
            status_code=decision.http_status,
            content=ErrorBody(
                error="Rate limit exceeded",
                message=decision.message,
                retry_after=rate.retry_after,
            ).model_dump(exclude_none=True),
            headers={
                "Retry-After": str(rate.retry_after),
                "X-RateLimit-Limit": str(rate.limit),
                "X-RateLimit-Remaining": str(rate.remaining),
                "X-RateLimit-Reset": rate.reset_at.isoformat(),
            },
        )

    budget = decision.budget
    content = ErrorBody(error="Budget limit reached", message=decision.message).model_dump(exclude_none=True)
    content["budget_status"] = {
        "ceiling": budget.ceiling,
        "spent_usd": budget.spent,
        "limit_usd": budget.limit,
        "tokens_used": budget.tokens_used,
        "token_limit": budget.token_limit,
        "resets_at": budget.resets_at.isoformat(),
    }
    return JSONResponse(status_code=decision.http_status, content=content)
