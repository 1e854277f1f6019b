"""
Gateways Package - Domain Layer

This package contains interfaces defining gateway contracts
for external service communications. Specific implementations
are provided by the infrastructure layer.
"""

from .reasoner import DemandFacts, HistoryPoint, IReasoner, PlanFacts
from .text_generation_gateway import ITextGenerationGateway

__all__ = [
    "DemandFacts",
    "HistoryPoint",
    "IReasoner",
    "ITextGenerationGateway",
    "PlanFacts",
]
