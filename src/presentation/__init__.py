"""
Presentation Layer Package

FastAPI routers exposing workflows, the planning budget context and the
health/info endpoints.
"""

from src.presentation import controllers

__all__ = ["controllers"]
