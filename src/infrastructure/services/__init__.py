"""Infrastructure services package."""

from .health_check_service import HealthCheckService
from .reasoners import DeterministicReasoner, LLMReasoner

__all__ = ["DeterministicReasoner", "HealthCheckService", "LLMReasoner"]
