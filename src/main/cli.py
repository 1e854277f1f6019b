"""
Command Line Entry Point - Main Layer

``plan`` runs one planning workflow against the configured CSV data
directory and prints the transcript as the stages progress; ``serve``
starts the HTTP API with uvicorn.
"""

import argparse
import asyncio
from typing import List, Optional, Sequence

import uvicorn

from src.application.dtos.workflow_dto import (
    HumanInputDTO,
    PolicyDTO,
    StartWorkflowRequestDTO,
    WorkflowStateDTO,
)
from src.domain.entities.demand import ConservatismLevel
from src.domain.entities.workflow import WorkflowStatus
from src.main.config import AppSettings, get_settings
from src.main.container import init_container
from src.shared import configure_logging, get_logger, update_logging_from_settings

logger = get_logger(__name__)


class TranscriptPrinter:
    """Progress callback that prints transcript messages not yet shown."""

    def __init__(self) -> None:
        self._seen = set()

    def __call__(self, state: WorkflowStateDTO) -> None:
        for message in state.transcript:
            if message.id in self._seen or message.is_thinking:
                continue
            self._seen.add(message.id)
            print(f"[{message.agent.value}] {message.message}")


def format_plan(state: WorkflowStateDTO) -> str:
    lines = [f"Workflow {state.id}: {state.status.value}"]
    if state.plan is not None:
        lines.append(f"{'item':<30} {'qty':>8} {'unit':>10} {'total':>12}")
        for item in state.plan.items:
            lines.append(
                f"{item.item_name[:30]:<30} {item.quantity:>8} "
                f"{item.unit_cost:>10,.2f} {item.total_cost:>12,.2f}"
            )
        lines.append(
            f"{'TOTAL':<30} {state.plan.total_units:>8} {'':>10} "
            f"{state.plan.total_cost:>12,.2f}"
        )
        lines.append(state.plan.rationale)
    lines.extend(state.messages)
    return "\n".join(lines)


async def run_plan(
    settings: AppSettings,
    item_ids: List[str],
    conservatism: ConservatismLevel,
    max_cost: Optional[float],
    feedback: Optional[str],
    as_json: bool,
) -> int:
    container = init_container(settings)
    use_case = container.planning_workflow_use_case()
    printer = None if as_json else TranscriptPrinter()

    request = StartWorkflowRequestDTO(
        item_ids=item_ids,
        policy=PolicyDTO(conservatism_level=conservatism, max_cost=max_cost),
    )
    state = await use_case.start(request, on_update=printer)

    if state.status == WorkflowStatus.WAITING_FOR_INPUT:
        if feedback is None:
            if not as_json:
                print("Review required: rerun with --feedback to answer the review.")
        else:
            state = await use_case.submit_feedback(
                state.id, HumanInputDTO(feedback=feedback), on_update=printer
            )

    if as_json:
        print(state.model_dump_json(indent=2))
    else:
        print()
        print(format_plan(state))

    return 1 if state.messages and state.messages[-1].startswith("Error:") else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m src.main",
        description="Forecast-driven procurement planner",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan = subparsers.add_parser("plan", help="Run a planning workflow")
    plan.add_argument("item_ids", nargs="+", help="Item ids in budget priority order")
    plan.add_argument(
        "--conservatism",
        choices=[level.value for level in ConservatismLevel],
        default=None,
        help="Conservatism level (defaults to PLANNING_DEFAULT_CONSERVATISM)",
    )
    plan.add_argument("--max-cost", type=float, default=None, help="Budget cap")
    plan.add_argument(
        "--feedback", default=None, help="Answer to the review checkpoint, if reached"
    )
    plan.add_argument("--data-dir", default=None, help="Override PLANNING_DATA_DIR")
    plan.add_argument("--json", action="store_true", help="Print the final state as JSON")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    settings = get_settings()
    update_logging_from_settings(settings)

    if args.command == "serve":
        logger.info("cli.serve", host=args.host or settings.app.host)
        uvicorn.run(
            "src.main.app:create_app",
            factory=True,
            host=args.host or settings.app.host,
            port=args.port or settings.app.port,
            reload=settings.app.reload,
        )
        return 0

    if args.data_dir:
        settings.planning.data_dir = args.data_dir
    conservatism = (
        ConservatismLevel(args.conservatism)
        if args.conservatism
        else settings.planning.default_conservatism
    )
    return asyncio.run(
        run_plan(
            settings,
            item_ids=args.item_ids,
            conservatism=conservatism,
            max_cost=args.max_cost,
            feedback=args.feedback,
            as_json=args.json,
        )
    )
