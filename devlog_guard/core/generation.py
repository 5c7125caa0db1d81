"""
Contract with the external text-generation service.

The pipeline only depends on this module; concrete providers live in
devlog_guard.sdk.
"""

from dataclasses import dataclass
from typing import Dict, List, Protocol

from .token_counter import TokenUsage


@dataclass(frozen=True)
class Completion:
    """Generated text plus the usage the provider reported for it."""
    text: str
    usage: TokenUsage


class TextGenerator(Protocol):
    """Anything that can turn role-tagged messages into a Completion."""

    def generate(self, messages: List[Dict[str, str]], max_tokens: int) -> Completion:
        ...


class UpstreamError(Exception):
    """Base class for failures of the generation service.

    Attributes:
        category: Stable user-facing category
        http_status: Status the request layer should answer with
    """
    category = "upstream_error"
    http_status = 502


class UpstreamTimeout(UpstreamError):
    """The generation call did not complete in time."""
    category = "timeout"
    http_status = 504


class UpstreamRateLimited(UpstreamError):
    """The generation service itself is throttling us."""
    category = "upstream_busy"
    http_status = 503


class UpstreamAuthError(UpstreamError):
    """Credentials for the generation service are missing or rejected."""
    category = "misconfiguration"
    http_status = 500
