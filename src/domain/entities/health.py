"""
Health domain entities.

Value objects describing whether the planner can currently do its job:
the planning tables it reads and the reasoning service it narrates with.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class ServiceStatus(str, Enum):
    """High-level availability for a dependency or the system."""

    UP = "up"
    DEGRADED = "degraded"
    DOWN = "down"
    UNKNOWN = "unknown"


@dataclass(slots=True)
class DependencyStatus:
    """Health of one planning dependency (a data file set or a remote service)."""

    name: str
    status: ServiceStatus
    message: Optional[str] = None
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    latency_ms: Optional[float] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SystemHealth:
    """Aggregated health for the planner."""

    status: ServiceStatus
    dependencies: List[DependencyStatus] = field(default_factory=list)

    @classmethod
    def from_dependencies(cls, dependencies: Iterable[DependencyStatus]) -> "SystemHealth":
        """
        Fold dependency results into one status.

        Any DOWN wins, then DEGRADED, then UNKNOWN. An unconfigured reasoning
        service is reported UNKNOWN because the deterministic narrator still
        lets plans complete.
        """
        items = list(dependencies)
        statuses = {dependency.status for dependency in items}

        if ServiceStatus.DOWN in statuses:
            overall = ServiceStatus.DOWN
        elif ServiceStatus.DEGRADED in statuses:
            overall = ServiceStatus.DEGRADED
        elif ServiceStatus.UNKNOWN in statuses:
            overall = ServiceStatus.UNKNOWN
        else:
            overall = ServiceStatus.UP

        return cls(status=overall, dependencies=items)


@dataclass(slots=True)
class ApplicationInfo:
    """Operational metadata surfaced by the /info endpoint."""

    name: str
    description: str
    version: str
    environment: str
    git_commit: str
    build_time: str
    started_at: datetime
    uptime_seconds: float
    status: ServiceStatus
    dependencies: List[DependencyStatus] = field(default_factory=list)
    planning: Dict[str, Any] = field(default_factory=dict)
