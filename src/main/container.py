"""
Dependency container injection module - Main Layer

This module implements the dependency injection container
to simplify the management and lifecycle of dependencies
in the application.
"""

from contextlib import asynccontextmanager

from dependency_injector import containers, providers

from src.application.models import SystemInfo
from src.application.use_cases.health_use_cases import (
    GetApplicationInfoUseCase,
    GetHealthStatusUseCase,
)
from src.application.use_cases.planning_workflow_use_case import (
    GetBudgetContextUseCase,
    PlanningWorkflowUseCase,
)
from src.domain.services.constraint_engine import ConstraintEngine
from src.domain.services.demand_analyzer import DemandAnalyzer
from src.domain.services.feedback_reconciler import FeedbackReconciler
from src.domain.services.inventory_planner import InventoryPlanner
from src.infrastructure.gateways.gemini_gateway import GeminiTextGenerationGateway
from src.infrastructure.repositories.csv_planning_data_repository import (
    CsvPlanningDataRepository,
)
from src.infrastructure.repositories.in_memory_workflow_repository import (
    InMemoryWorkflowRepository,
)
from src.infrastructure.services.health_check_service import HealthCheckService
from src.infrastructure.services.reasoners import DeterministicReasoner, LLMReasoner
from src.shared import get_logger

from .config import AppSettings

logger = get_logger(__name__)


def _reasoning_mode(api_key):
    return "llm" if api_key else "deterministic"


def _enum_value(value):
    return value.value if hasattr(value, "value") else str(value)


class AppContainer(containers.DeclarativeContainer):
    """Composition Root using dependecy-injector."""

    wiring_config = containers.WiringConfiguration(
        packages=["..presentation", "..application"]
    )

    # Settings
    config = providers.Configuration()

    # Infrastructure
    planning_data_repository = providers.Singleton(
        CsvPlanningDataRepository,
        data_dir=config.planning.data_dir,
        forecasts_file=config.planning.forecasts_file,
        costs_file=config.planning.costs_file,
        budgets_file=config.planning.budgets_file,
        capacities_file=config.planning.capacities_file,
        businesses_file=config.planning.businesses_file,
        fallback_budget=config.planning.fallback_budget,
        fallback_capacity=config.planning.fallback_capacity,
    )

    workflow_repository = providers.Singleton(
        InMemoryWorkflowRepository,
        max_workflows=config.planning.max_stored_workflows,
    )

    # Gateways
    text_generation_gateway = providers.Singleton(
        GeminiTextGenerationGateway,
        api_key=config.reasoning.api_key,
        model=config.reasoning.model,
        base_url=config.reasoning.base_url,
        timeout=config.reasoning.timeout_seconds,
    )

    reasoning_mode = providers.Callable(_reasoning_mode, config.reasoning.api_key)

    # Reasoner: chosen once from the presence of an API key
    deterministic_reasoner = providers.Singleton(DeterministicReasoner)

    reasoner = providers.Selector(
        reasoning_mode,
        llm=providers.Singleton(
            LLMReasoner,
            gateway=text_generation_gateway,
            deadline_seconds=config.reasoning.timeout_seconds,
            fallback=deterministic_reasoner,
        ),
        deterministic=deterministic_reasoner,
    )

    probed_gateway = providers.Selector(
        reasoning_mode,
        llm=text_generation_gateway,
        deterministic=providers.Object(None),
    )

    # Domain services
    demand_analyzer = providers.Factory(DemandAnalyzer, reasoner=reasoner)

    inventory_planner = providers.Singleton(
        InventoryPlanner,
        price_markup=config.planning.price_markup,
        z_interval=config.planning.z_interval,
    )

    constraint_engine = providers.Singleton(ConstraintEngine)

    feedback_reconciler = providers.Singleton(FeedbackReconciler)

    # Application (use cases)
    planning_workflow_use_case = providers.Factory(
        PlanningWorkflowUseCase,
        planning_data_repository=planning_data_repository,
        workflow_repository=workflow_repository,
        demand_analyzer=demand_analyzer,
        inventory_planner=inventory_planner,
        constraint_engine=constraint_engine,
        feedback_reconciler=feedback_reconciler,
        reasoner=reasoner,
        warehouse_id=config.planning.warehouse_id,
    )

    get_budget_context_use_case = providers.Factory(
        GetBudgetContextUseCase,
        planning_data_repository=planning_data_repository,
        warehouse_id=config.planning.warehouse_id,
    )

    health_check_service = providers.Singleton(
        HealthCheckService,
        planning_data_repository=planning_data_repository,
        text_generation_gateway=probed_gateway,
    )

    system_info = providers.Singleton(
        SystemInfo,
        title=config.app.title,
        description=config.app.description,
        version=config.app.version,
        environment=providers.Callable(_enum_value, config.environment),
        git_commit=config.app.git_commit,
        build_time=config.app.build_time,
        data_dir=config.planning.data_dir,
        warehouse_id=config.planning.warehouse_id,
        fallback_budget=config.planning.fallback_budget,
        fallback_capacity=config.planning.fallback_capacity,
        reasoning_model=config.reasoning.model,
        reasoning_enabled=providers.Callable(bool, config.reasoning.api_key),
    )

    get_health_status_use_case = providers.Factory(
        GetHealthStatusUseCase,
        health_check_service=health_check_service,
    )

    get_application_info_use_case = providers.Factory(
        GetApplicationInfoUseCase,
        health_check_service=health_check_service,
        system_info=system_info,
    )


# -------------------------
# Global Container Instance
# -------------------------
_app_container: AppContainer | None = None


def init_container(settings: AppSettings) -> AppContainer:
    """Initialize global container with application settings."""

    global _app_container

    container = AppContainer()
    container.config.from_pydantic(settings)
    _app_container = container
    return container


def get_container() -> AppContainer:
    """Get the initialized global container."""

    if _app_container is None:
        raise RuntimeError("Container has not been initialized yet")

    return _app_container


@asynccontextmanager
async def app_lifespan():
    """
    Lifecycle hook for the FastAPI lifespan.

    Reports which planning tables are missing and which reasoner variant is
    active before the first request is served.
    """
    container = get_container()

    planning_data_repository = container.planning_data_repository()
    missing = planning_data_repository.missing_files()
    if missing:
        logger.warning(
            "container.planning_data.missing",
            data_dir=str(planning_data_repository.data_dir),
            tables=missing,
        )

    logger.info(
        "container.resources.initialized",
        reasoner=type(container.reasoner()).__name__,
    )
    try:
        yield container
    finally:
        logger.info("container.resources.shutdown")
