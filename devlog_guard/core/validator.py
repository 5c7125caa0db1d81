"""
Claim validation for generated posts.

Flags statements in model output that the user's evidence cannot back up.
Findings are soft: they are returned as warning strings alongside the
generated text, never raised and never used to block a response.

Warning format: "<kind>: <detail>"
"""

import re
from enum import Enum
from typing import List, Optional, Sequence

from .vocabulary import banned_words


class WarningKind(Enum):
    """Fixed vocabulary of warning kinds."""
    TONE_VIOLATION = "tone_violation"
    NUMERIC_CLAIMS = "numeric_claims_without_evidence"
    PERFORMANCE_CLAIMS = "performance_claims_without_evidence"
    EVIDENCE_NOT_VERBATIM = "evidence_not_verbatim"


# Percentages, multipliers (3x, 3×, 2배), "improved by N", "N times", "N-fold"
NUMERIC_CLAIM = re.compile(
    r"\d+%|\d+배|\d+x|\d+×|improved by \d+|\d+\s*times|by\s+\d+%|by\s+\d+x|\d+\s*-?\s*fold",
    re.IGNORECASE,
)

# Qualitative superlatives, Korean equivalents, and multiplier-qualified
# comparatives such as "3x faster"
PERFORMANCE_CLAIM = re.compile(
    r"(?:significantly|much|dramatically)\s+(?:faster|better|improved)"
    r"|way\s+(?:faster|better)|far\s+(?:better|faster)"
    r"|greatly\s+(?:enhanced|improved)"
    r"|\d+(?:\.\d+)?\s*(?:x|×|times)\s+(?:faster|better|quicker|smaller|cheaper)"
    r"|\d+(?:\.\d+)?\s*배\s*(?:빠른|빨라|향상|개선)"
    r"|훨씬\s+(?:빠른|나은|좋은)|월등히\s+(?:나은|빠른)|크게\s+(?:개선|향상)",
    re.IGNORECASE,
)

EVIDENCE_FIELDS = ("evidence_before", "evidence_after")


def format_warning(kind: WarningKind, detail: str) -> str:
    return f"{kind.value}: {detail}"


def is_evidence_missing(
    evidence_before: Optional[str],
    evidence_after: Optional[str]
) -> bool:
    """Evidence is missing iff neither before nor after text was supplied."""
    return not evidence_before and not evidence_after


def detect_tone_violations(text: str) -> List[str]:
    """Case-insensitive scan of one text for banned vocabulary.

    Returns one warning per banned term found in the text.
    """
    lowered = text.lower()
    return [
        format_warning(WarningKind.TONE_VIOLATION, f'"{word}" detected')
        for word in banned_words()
        if word.lower() in lowered
    ]


def detect_unsupported_claims(texts: Sequence[str]) -> List[str]:
    """Flag numeric and performance claims across all generated variants.

    Intended for requests without evidence. Each family contributes at most
    one warning regardless of how many matches occur.
    """
    combined = "\n".join(texts)
    warnings = []
    if NUMERIC_CLAIM.search(combined):
        warnings.append(format_warning(
            WarningKind.NUMERIC_CLAIMS,
            "numeric claims detected but no evidence provided"
        ))
    if PERFORMANCE_CLAIM.search(combined):
        warnings.append(format_warning(
            WarningKind.PERFORMANCE_CLAIMS,
            "performance claims detected but no evidence provided"
        ))
    return warnings


def check_evidence_verbatim(
    texts: Sequence[str],
    evidence_before: Optional[str],
    evidence_after: Optional[str]
) -> List[str]:
    """Confirm supplied evidence appears as an exact substring of each variant.

    Returns one warning per (variant, evidence field) miss.
    """
    warnings = []
    for text in texts:
        for field_name, evidence in zip(EVIDENCE_FIELDS, (evidence_before, evidence_after)):
            if evidence and evidence not in text:
                warnings.append(format_warning(
                    WarningKind.EVIDENCE_NOT_VERBATIM,
                    f"{field_name} may not be quoted exactly as provided"
                ))
    return warnings


def validate_generated_texts(
    texts: Sequence[str],
    evidence_before: Optional[str] = None,
    evidence_after: Optional[str] = None
) -> Optional[List[str]]:
    """Run every claim check over the generated variants.

    Args:
        texts: Generated text, one entry per platform/language variant
        evidence_before: Before-evidence as supplied by the user
        evidence_after: After-evidence as supplied by the user

    Returns:
        List of warning strings, or None when no warning applies
    """
    warnings: List[str] = []
    for text in texts:
        warnings.extend(detect_tone_violations(text))

    if is_evidence_missing(evidence_before, evidence_after):
        warnings.extend(detect_unsupported_claims(texts))
    else:
        warnings.extend(check_evidence_verbatim(texts, evidence_before, evidence_after))

    return warnings or None
