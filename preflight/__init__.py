"""Preflight: feedback collection and roadmap tracking service."""

__version__ = "0.1.0"
