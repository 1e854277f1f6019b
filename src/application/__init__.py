"""
Application Layer Package

Use cases that drive a planning workflow through its stages and report
service health, plus the DTOs they exchange with the presentation layer.
"""

from src.application import dtos, models, use_cases

__all__ = ["dtos", "models", "use_cases"]
