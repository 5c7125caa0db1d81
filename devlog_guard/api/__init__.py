"""
HTTP API for DevLog Guard.
"""

from .app import create_app

__all__ = ["create_app"]
