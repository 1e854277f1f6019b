from __future__ import annotations

from datetime import datetime, timezone

from src.application.dtos.health_dto import (
    ApplicationInfoDTO,
    DependencyStatusDTO,
    SystemHealthDTO,
)
from src.domain.entities.health import (
    ApplicationInfo,
    DependencyStatus,
    ServiceStatus,
    SystemHealth,
)


def test_dependency_status_dto_from_domain() -> None:
    domain = DependencyStatus(
        name="planning_data",
        status=ServiceStatus.DEGRADED,
        details={"missing": ["budgets"]},
    )
    dto = DependencyStatusDTO.from_domain(domain)
    assert dto.name == "planning_data"
    assert dto.status is ServiceStatus.DEGRADED
    assert dto.details == {"missing": ["budgets"]}


def test_system_health_dto_from_domain() -> None:
    domain = SystemHealth(status=ServiceStatus.UP, dependencies=[])
    dto = SystemHealthDTO.from_domain(domain)
    assert dto.status is ServiceStatus.UP
    assert dto.dependencies == []


def test_application_info_dto_from_domain() -> None:
    now = datetime.now(timezone.utc)
    info = ApplicationInfo(
        name="Procurement Planner",
        description="desc",
        version="1.0",
        environment="development",
        git_commit="abc",
        build_time="2024-09-01",
        started_at=now,
        uptime_seconds=42.0,
        status=ServiceStatus.UP,
        dependencies=[DependencyStatus(name="reasoning", status=ServiceStatus.UP)],
        planning={"warehouse_id": 11},
    )

    dto = ApplicationInfoDTO.from_domain(info)
    assert dto.name == "Procurement Planner"
    assert dto.status is ServiceStatus.UP
    assert dto.planning == {"warehouse_id": 11}
    assert dto.dependencies[0].name == "reasoning"
