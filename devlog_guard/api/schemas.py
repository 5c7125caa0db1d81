from typing import Literal, Optional

from pydantic import BaseModel, Field

from devlog_guard.core.pipeline import GenerationRequest, OutputLanguage, Platform

FIELD_LIMITS = {
    "raw_log": 2000,
    "outcome": 200,
    "evidence_before": 200,
    "evidence_after": 200,
    "human_insight": 200,
}


class GenerateBody(BaseModel):
    raw_log: str = Field(min_length=1, max_length=FIELD_LIMITS["raw_log"])
    outcome: str = Field(min_length=1, max_length=FIELD_LIMITS["outcome"])
    tone_preset: Literal["linkedin", "x"]
    output_language: Literal["ko", "en", "both"]
    evidence_before: Optional[str] = Field(default=None, max_length=FIELD_LIMITS["evidence_before"])
    evidence_after: Optional[str] = Field(default=None, max_length=FIELD_LIMITS["evidence_after"])
    human_insight: Optional[str] = Field(default=None, max_length=FIELD_LIMITS["human_insight"])

    def to_request(self) -> GenerationRequest:
        return GenerationRequest(
            raw_log=self.raw_log,
            outcome=self.outcome,
            platform=Platform(self.tone_preset),
            output_language=OutputLanguage(self.output_language),
            evidence_before=self.evidence_before,
            evidence_after=self.evidence_after,
            human_insight=self.human_insight,
        )


class ErrorBody(BaseModel):
    error: str
    message: str
    retry_after: Optional[int] = None
