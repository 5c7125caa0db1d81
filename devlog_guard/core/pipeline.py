"""
Generation-safety pipeline.

Runs one request through admission, generation and claim validation, with
code extraction done on the raw log independently of generation.

Order:
1. Admission - rate limit, then monthly budget (raises AdmissionRejected)
2. Extraction - code fragments from the raw log
3. Generation - one completion per requested language
4. Ledger - summed usage recorded once, after all completions
5. Validation - warnings attached to the response
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from devlog_guard.config.loader import GuardConfig
from devlog_guard.observability.logger import get_logger

from .admission import AdmissionGuard, RateLimiter
from .extractor import CodeFragment, MAX_FRAGMENTS, MAX_LINES, extract_code_fragments
from .generation import TextGenerator, UpstreamError
from .ledger import UsageLedger, build_ledger
from .prompts import build_messages
from .token_counter import TokenUsage
from .validator import is_evidence_missing, validate_generated_texts

log = get_logger("pipeline")


class Platform(Enum):
    LINKEDIN = "linkedin"
    X = "x"


class OutputLanguage(Enum):
    KO = "ko"
    EN = "en"
    BOTH = "both"

    def languages(self) -> List[str]:
        """Concrete languages to generate, in generation order."""
        if self == OutputLanguage.BOTH:
            return ["ko", "en"]
        return [self.value]


DEFAULT_MAX_TOKENS = {Platform.LINKEDIN: 1000, Platform.X: 500}


@dataclass(frozen=True)
class GenerationRequest:
    """A validated request to turn a work log into a post."""
    raw_log: str
    outcome: str
    platform: Platform
    output_language: OutputLanguage
    evidence_before: Optional[str] = None
    evidence_after: Optional[str] = None
    human_insight: Optional[str] = None


@dataclass
class GenerationResponse:
    """Pipeline output.

    warnings is None when no check produced a finding; it is never an
    empty list.
    """
    platform: Platform
    variants: Dict[str, str]
    code_fragments: List[CodeFragment]
    evidence_missing: bool
    token_usage: TokenUsage
    warnings: Optional[List[str]] = None

    @property
    def text(self) -> str:
        """Primary text: Korean when generated, else English."""
        return self.variants.get("ko") or self.variants.get("en") or ""

    def to_dict(self) -> Dict[str, Any]:
        content: Dict[str, Any] = {"text": self.text}
        content.update(self.variants)
        data: Dict[str, Any] = {
            self.platform.value: content,
            "code_fragments": [f.to_dict() for f in self.code_fragments],
            "evidence_missing": self.evidence_missing,
            "token_usage": self.token_usage.to_dict(),
        }
        if self.warnings is not None:
            data["warnings"] = list(self.warnings)
        return data


@dataclass
class GenerationPipeline:
    """Wires the safety components around a text generator."""
    admission: AdmissionGuard
    ledger: UsageLedger
    generator: TextGenerator
    max_tokens: Dict[Platform, int] = field(default_factory=lambda: dict(DEFAULT_MAX_TOKENS))
    max_fragments: int = MAX_FRAGMENTS
    max_lines: int = MAX_LINES

    def run(self, request: GenerationRequest, client_id: str) -> GenerationResponse:
        """Run one request through the pipeline.

        Args:
            request: Validated generation request
            client_id: Identifier used for rate limiting

        Returns:
            GenerationResponse with text, fragments and warnings

        Raises:
            AdmissionRejected: If the client is rate limited or the budget is spent
            UpstreamError: If the generation service fails
        """
        self.admission.admit(client_id)

        fragments = extract_code_fragments(request.raw_log, self.max_fragments, self.max_lines)
        evidence_missing = is_evidence_missing(request.evidence_before, request.evidence_after)

        variants: Dict[str, str] = {}
        usage = TokenUsage()
        for language in request.output_language.languages():
            try:
                completion = self.generator.generate(
                    build_messages(request, language),
                    max_tokens=self.max_tokens[request.platform],
                )
            except UpstreamError as e:
                log.warning(
                    "upstream_failure",
                    client_id=client_id,
                    category=e.category,
                    language=language,
                    error=str(e),
                )
                raise
            variants[language] = completion.text
            usage = usage + completion.usage

        self.ledger.record_usage(usage.prompt_tokens, usage.completion_tokens, usage.total_tokens)

        warnings = validate_generated_texts(
            list(variants.values()),
            request.evidence_before,
            request.evidence_after,
        )

        log.info(
            "generation_completed",
            client_id=client_id,
            platform=request.platform.value,
            languages=list(variants),
            fragments=len(fragments),
            warnings=len(warnings or []),
            total_tokens=usage.total_tokens,
        )

        return GenerationResponse(
            platform=request.platform,
            variants=variants,
            code_fragments=fragments,
            evidence_missing=evidence_missing,
            token_usage=usage,
            warnings=warnings,
        )


def build_pipeline(
    config: GuardConfig,
    generator: TextGenerator,
    ledger: Optional[UsageLedger] = None
) -> GenerationPipeline:
    """Construct a pipeline, with fresh guard state, from a GuardConfig."""
    ledger = ledger or build_ledger(config)
    limiter = RateLimiter(
        max_requests=config.rate_limit.max_requests,
        window_seconds=config.rate_limit.window_seconds,
    )
    return GenerationPipeline(
        admission=AdmissionGuard(limiter, ledger),
        ledger=ledger,
        generator=generator,
        max_tokens={platform: config.platform_max_tokens[platform.value] for platform in Platform},
        max_fragments=config.extraction.max_fragments,
        max_lines=config.extraction.max_lines,
    )
