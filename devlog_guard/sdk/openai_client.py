"""
OpenAI-backed text generator.

Turns chat completions into Completion objects and reclassifies provider
failures into the pipeline's upstream error categories.
"""

from typing import Dict, List, Optional

import openai
from openai import OpenAI

from ..core.generation import (
    Completion,
    UpstreamAuthError,
    UpstreamError,
    UpstreamRateLimited,
    UpstreamTimeout,
)
from ..core.token_counter import TokenUsage


class OpenAIGenerator:
    """TextGenerator implementation over OpenAI chat completions."""

    def __init__(
        self,
        model: str,
        temperature: float = 0.7,
        timeout: float = 30.0,
        client: Optional[OpenAI] = None,
    ):
        """Initialize the generator.

        Args:
            model: OpenAI model name (required)
            temperature: Sampling temperature
            timeout: Per-request timeout in seconds
            client: Preconfigured client; one is created from the
                environment (OPENAI_API_KEY) when omitted

        Raises:
            ValueError: If model is missing/empty
        """
        if not model or not model.strip():
            raise ValueError("model is required and cannot be empty")

        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            try:
                self._client = OpenAI(timeout=self.timeout)
            except openai.OpenAIError as e:
                raise UpstreamAuthError(f"OpenAI client could not be configured: {e}") from e
        return self._client

    def generate(self, messages: List[Dict[str, str]], max_tokens: int) -> Completion:
        """Create one chat completion.

        Args:
            messages: Role-tagged messages (required)
            max_tokens: Completion token ceiling

        Returns:
            Completion with generated text and reported usage

        Raises:
            ValueError: If messages is empty
            UpstreamTimeout: If the call timed out
            UpstreamRateLimited: If OpenAI throttled the call
            UpstreamAuthError: If the API key is missing or rejected
            UpstreamError: For any other API failure
        """
        if not messages:
            raise ValueError("messages is required and cannot be empty")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=max_tokens,
            )
        except openai.APITimeoutError as e:
            raise UpstreamTimeout("Generation timed out") from e
        except openai.RateLimitError as e:
            raise UpstreamRateLimited("Generation service is busy") from e
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            raise UpstreamAuthError("Generation service rejected the credentials") from e
        except openai.APIError as e:
            raise UpstreamError(f"Generation failed: {e}") from e

        usage = response.usage
        if not usage:
            raise UpstreamError("OpenAI response missing usage information")

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""

        return Completion(
            text=text,
            usage=TokenUsage(
                prompt_tokens=usage.prompt_tokens,
                completion_tokens=usage.completion_tokens,
                total_tokens=usage.total_tokens,
            ),
        )
