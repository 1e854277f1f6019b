"""
Infrastructure Repository - CSV Planning Data

Loads the forecast, SKU cost, budget, warehouse capacity and business tables
from a data directory with pandas and turns them into a PlanningContext.
"""

import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
import structlog

from src.domain.entities.errors import PlanningDataError
from src.domain.entities.planning_data import (
    BudgetRecord,
    CapacityRecord,
    CostEntry,
    ForecastRecord,
    PlanningContext,
)
from src.domain.repositories.planning_data_repository import IPlanningDataRepository
from src.shared.consts import DEFAULT_BUDGET, DEFAULT_WAREHOUSE_CAPACITY

logger = structlog.get_logger(__name__)

# Positions in scored_df.csv: unique_id, ds, AutoARIMA, AutoARIMA-lo-95,
# AutoARIMA-hi-95, confidence_score, client, warehouse, product.
FORECAST_COLUMNS = (0, 1, 2, 4, 7, 9, 10, 11, 12)
FORECAST_REQUIRED_COLUMNS = 8


def _optional_int(value: float) -> Optional[int]:
    if value is None or np.isnan(value):
        return None
    return int(value)


def _optional_float(value: float) -> Optional[float]:
    if value is None or np.isnan(value):
        return None
    return float(value)


class CsvPlanningDataRepository(IPlanningDataRepository):
    """Planning data repository backed by CSV files in one directory."""

    def __init__(
        self,
        data_dir: str,
        *,
        forecasts_file: str = "scored_df.csv",
        costs_file: str = "SKU_Costs.csv",
        budgets_file: str = "budget_df.csv",
        capacities_file: str = "warehouse_constraints.csv",
        businesses_file: str = "businesses.csv",
        fallback_budget: float = DEFAULT_BUDGET,
        fallback_capacity: float = DEFAULT_WAREHOUSE_CAPACITY,
    ):
        self.data_dir = Path(data_dir)
        self.files: Dict[str, Path] = {
            "forecasts": self.data_dir / forecasts_file,
            "costs": self.data_dir / costs_file,
            "budgets": self.data_dir / budgets_file,
            "capacities": self.data_dir / capacities_file,
            "businesses": self.data_dir / businesses_file,
        }
        self.fallback_budget = fallback_budget
        self.fallback_capacity = fallback_capacity

    async def load_context(self) -> PlanningContext:
        return await asyncio.to_thread(self._load_context)

    def missing_files(self) -> List[str]:
        return [name for name, path in self.files.items() if not path.is_file()]

    def _load_context(self) -> PlanningContext:
        forecasts = self._load_forecasts()
        costs = self._load_costs()
        budgets = self._load_budgets()
        capacities = self._load_capacities()
        item_names = self._load_item_names()

        logger.info(
            "planning.data.loaded",
            data_dir=str(self.data_dir),
            forecasts=len(forecasts),
            costs=len(costs),
            budgets=len(budgets),
            capacities=len(capacities),
            named_items=len(item_names),
        )

        return PlanningContext(
            forecasts=tuple(forecasts),
            costs=costs,
            budgets=tuple(budgets),
            capacities=tuple(capacities),
            item_names=item_names,
            fallback_budget=self.fallback_budget,
            fallback_capacity=self.fallback_capacity,
        )

    def _read(self, name: str, min_columns: int) -> Optional[pd.DataFrame]:
        path = self.files[name]
        if not path.is_file():
            logger.warning("planning.data.file_missing", table=name, path=str(path))
            return None

        try:
            df = pd.read_csv(path, dtype=str, skipinitialspace=True)
        except pd.errors.EmptyDataError:
            logger.warning("planning.data.file_empty", table=name, path=str(path))
            return None
        except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
            raise PlanningDataError(
                f"Unable to parse {path.name}: {e}",
                details={"table": name, "path": str(path)},
            ) from e

        if df.shape[1] < min_columns:
            raise PlanningDataError(
                f"{path.name} has {df.shape[1]} columns, expected at least {min_columns}",
                details={"table": name, "path": str(path)},
            )
        return df

    @staticmethod
    def _numeric(df: pd.DataFrame, position: int) -> pd.Series:
        if position >= df.shape[1]:
            return pd.Series(np.nan, index=df.index)
        values = pd.to_numeric(df.iloc[:, position], errors="coerce")
        # "inf" parses as a number; treat it like any other unusable value
        return values.replace([np.inf, -np.inf], np.nan)

    @staticmethod
    def _dates(df: pd.DataFrame, position: int) -> pd.Series:
        return pd.to_datetime(df.iloc[:, position], errors="coerce")

    def _load_forecasts(self) -> List[ForecastRecord]:
        df = self._read("forecasts", FORECAST_REQUIRED_COLUMNS)
        if df is None:
            return []

        id_col, ds_col, yhat_col, lo_col, hi_col, score_col, client_col, wh_col, product_col = (
            FORECAST_COLUMNS
        )
        frame = pd.DataFrame(
            {
                "item_id": df.iloc[:, id_col].str.strip(),
                "ds": self._dates(df, ds_col),
                "forecast": self._numeric(df, yhat_col),
                "ci_low": self._numeric(df, lo_col),
                "ci_high": self._numeric(df, hi_col),
                "confidence_score": self._numeric(df, score_col),
                "client": self._numeric(df, client_col),
                "warehouse": self._numeric(df, wh_col),
                "product": self._numeric(df, product_col),
            }
        )

        valid = frame.dropna(subset=["item_id", "ds", "forecast", "ci_low", "ci_high"])
        valid = valid[valid["item_id"] != ""]
        dropped = len(frame) - len(valid)
        if dropped:
            logger.warning("planning.data.rows_dropped", table="forecasts", rows=dropped)

        return [
            ForecastRecord(
                item_id=row.item_id,
                date=row.ds.date(),
                forecast=float(row.forecast),
                ci_low=float(row.ci_low),
                ci_high=float(row.ci_high),
                confidence_score=_optional_float(row.confidence_score),
                client=_optional_int(row.client),
                warehouse=_optional_int(row.warehouse),
                product=_optional_int(row.product),
            )
            for row in valid.itertuples(index=False)
        ]

    def _load_costs(self) -> Dict[str, CostEntry]:
        df = self._read("costs", 3)
        if df is None:
            return {}

        frame = pd.DataFrame(
            {
                "product": df.iloc[:, 0].str.strip(),
                "holding": self._numeric(df, 1),
                "shortage": self._numeric(df, 2),
            }
        ).dropna()
        frame = frame[frame["product"] != ""]

        costs: Dict[str, CostEntry] = {}
        for row in frame.itertuples(index=False):
            costs[row.product] = CostEntry(
                product_id=row.product,
                holding_cost=float(row.holding),
                shortage_cost=float(row.shortage),
            )
        return costs

    def _load_budgets(self) -> List[BudgetRecord]:
        df = self._read("budgets", 2)
        if df is None:
            return []

        frame = pd.DataFrame(
            {"ds": self._dates(df, 0), "budget": self._numeric(df, 1)}
        ).dropna()
        return [
            BudgetRecord(date=row.ds.date(), budget=float(row.budget))
            for row in frame.itertuples(index=False)
        ]

    def _load_capacities(self) -> List[CapacityRecord]:
        df = self._read("capacities", 3)
        if df is None:
            return []

        frame = pd.DataFrame(
            {
                "ds": self._dates(df, 0),
                "capacity": self._numeric(df, 1),
                "warehouse": self._numeric(df, 2),
            }
        ).dropna()
        return [
            CapacityRecord(
                date=row.ds.date(),
                warehouse_id=int(row.warehouse),
                capacity=float(row.capacity),
            )
            for row in frame.itertuples(index=False)
        ]

    def _load_item_names(self) -> Dict[str, str]:
        df = self._read("businesses", 5)
        if df is None:
            return {}

        names: Dict[str, str] = {}
        for _, row in df.iterrows():
            item_ids = self._split(row.iloc[4])
            product_names: Sequence[str] = (
                self._split(row.iloc[5]) if df.shape[1] > 5 else []
            )
            for index, item_id in enumerate(item_ids):
                name = product_names[index] if index < len(product_names) else ""
                names[item_id] = name or f"Product {item_id}"
        return names

    @staticmethod
    def _split(value: object) -> List[str]:
        if not isinstance(value, str):
            return []
        return [part.strip() for part in value.split("|") if part.strip()]
