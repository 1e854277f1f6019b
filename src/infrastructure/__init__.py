"""
Infrastructure Layer Package

Adapters behind the domain interfaces: pandas CSV loading, the in-memory
workflow store, the Gemini REST gateway and the two reasoner variants.
"""

from src.infrastructure import gateways, repositories, services

__all__ = ["gateways", "repositories", "services"]
