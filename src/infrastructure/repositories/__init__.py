"""
Repositories Package - Infrastructure Layer

This package contains concrete implementations of the repository
interfaces defined in the domain layer. These implementations
handle the details of data persistence.
"""

from .csv_planning_data_repository import CsvPlanningDataRepository
from .in_memory_workflow_repository import InMemoryWorkflowRepository

__all__ = ["CsvPlanningDataRepository", "InMemoryWorkflowRepository"]
