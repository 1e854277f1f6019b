"""
Repositories Package

This package contains interfaces defining repository contracts
for data access operations. Specific implementations are provided
by the infrastructure layer.
"""

from .planning_data_repository import IPlanningDataRepository
from .workflow_repository import IWorkflowRepository

__all__ = ["IPlanningDataRepository", "IWorkflowRepository"]
