"""
Domain Layer Package

Planning records, the workflow state machine and the pure planning services
(quantile, demand analysis, newsvendor sizing, constraints, review gate and
feedback reconciliation). Nothing here performs I/O.
"""

from src.domain import entities, gateways, ports, repositories, services

__all__ = ["entities", "gateways", "ports", "repositories", "services"]
