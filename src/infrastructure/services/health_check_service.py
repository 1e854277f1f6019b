"""Infrastructure implementation for planner health checks."""

from __future__ import annotations

import asyncio
from time import perf_counter
from typing import List, Optional

from src.domain.entities.health import DependencyStatus, ServiceStatus, SystemHealth
from src.domain.gateways.text_generation_gateway import ITextGenerationGateway
from src.domain.ports.health_check import IHealthCheckService
from src.infrastructure.repositories.csv_planning_data_repository import (
    CsvPlanningDataRepository,
)

REQUIRED_TABLES = ("forecasts", "costs")


class HealthCheckService(IHealthCheckService):
    """Check the planning data directory and the reasoning service."""

    def __init__(
        self,
        planning_data_repository: CsvPlanningDataRepository,
        text_generation_gateway: Optional[ITextGenerationGateway] = None,
    ) -> None:
        self._planning_data = planning_data_repository
        self._gateway = text_generation_gateway

    async def evaluate(self) -> SystemHealth:
        """Run checks concurrently and aggregate system health."""

        checks = {
            "planning_data": asyncio.create_task(self._check_planning_data()),
            "reasoning": asyncio.create_task(self._check_reasoning()),
        }

        dependency_statuses: List[DependencyStatus] = []
        for name, task in checks.items():
            try:
                dependency_statuses.append(await task)
            except Exception as exc:  # pragma: no cover
                dependency_statuses.append(
                    DependencyStatus(
                        name=name,
                        status=ServiceStatus.DOWN,
                        message=str(exc),
                    )
                )

        return SystemHealth.from_dependencies(dependency_statuses)

    async def _check_planning_data(self) -> DependencyStatus:
        data_dir = self._planning_data.data_dir
        missing = await asyncio.to_thread(self._planning_data.missing_files)
        details = {"data_dir": str(data_dir), "missing": missing}

        if not missing:
            return DependencyStatus(
                name="planning_data",
                status=ServiceStatus.UP,
                message="All planning tables present",
                details=details,
            )

        if any(table in missing for table in REQUIRED_TABLES):
            message = "Forecast or cost table missing; plans will be empty"
        else:
            message = "Optional planning tables missing; fallback values apply"

        return DependencyStatus(
            name="planning_data",
            status=ServiceStatus.DEGRADED,
            message=message,
            details=details,
        )

    async def _check_reasoning(self) -> DependencyStatus:
        if self._gateway is None:
            return DependencyStatus(
                name="reasoning",
                status=ServiceStatus.UNKNOWN,
                message="Reasoning service not configured; deterministic explanations in use.",
            )

        start = perf_counter()
        reachable = await self._gateway.ping()
        latency_ms = (perf_counter() - start) * 1000

        if reachable:
            return DependencyStatus(
                name="reasoning",
                status=ServiceStatus.UP,
                message="Model metadata request successful",
                latency_ms=latency_ms,
            )
        return DependencyStatus(
            name="reasoning",
            status=ServiceStatus.DOWN,
            message="Model metadata request failed",
            latency_ms=latency_ms,
        )
