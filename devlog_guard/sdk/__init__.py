"""
SDK for DevLog Guard.

Provides text-generation adapters for the generation pipeline.
"""

from .openai_client import OpenAIGenerator

__all__ = ["OpenAIGenerator"]
