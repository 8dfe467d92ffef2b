"""SAFE-8 AI-readiness assessment service."""

__version__ = "1.0.0"
