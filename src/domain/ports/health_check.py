"""Port for probing planner dependencies."""

from __future__ import annotations

from typing import Protocol

from src.domain.entities.health import SystemHealth


class IHealthCheckService(Protocol):
    """Reports readiness of the planning tables and the reasoning service."""

    async def evaluate(self) -> SystemHealth:
        ...
