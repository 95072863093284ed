from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from typing import Sequence

from agent_wizard.errors import WizardError
from agent_wizard.llm_config import LLMConfig
from agent_wizard.models import Plan
from agent_wizard.wizard import AgentCreationService, build_agent_creation_service

DEFAULT_OBJECTIVE = (
    "In pharma manufacturing context, investigate a deviation given a deviation "
    "description and find its root cause"
)


def _format_plan(plan: Plan) -> str:
    lines = [
        f"Agent ID: {plan.id}",
        f"Agent Name: {plan.name}",
        f"Objective: {plan.objective}",
        "",
        "Goals and Subgoals:",
    ]
    for i, goal in enumerate(plan.goals, start=1):
        lines.append(f"Goal {i}: {goal.description}")
        for j, subgoal in enumerate(goal.subgoals, start=1):
            lines.append(f"  Subgoal {i}.{j}: {subgoal.description}")
            if subgoal.actions:
                lines.append("    Actions:")
            for k, action in enumerate(subgoal.actions, start=1):
                lines.append(f"      {i}.{j}.{k}: {action.description}")
    return "\n".join(lines)


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="agent-wizard",
        description="Decompose an objective into goals, subgoals and actions.",
    )
    parser.add_argument("objective", nargs="?", default=DEFAULT_OBJECTIVE)
    parser.add_argument("--config", default=None, help="Path to a YAML config file")
    parser.add_argument("--provider", choices=["claude", "stub"], default=None)
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None, *, service: AgentCreationService | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if service is None:
            config = LLMConfig.load(args.config)
            if args.provider:
                config = dataclasses.replace(config, provider=args.provider)
            service = build_agent_creation_service(config)

        print(f"Decomposing objective: {args.objective}")
        session_id = service.start_session()
        print(f"Started new wizard session with ID: {session_id}")
        session = service.process_objective(session_id, args.objective)
        print(f"Processed objective, current state: {session.state.value}")
        service.review_agent(session_id)
        plan = service.complete_creation(session_id)
    except WizardError as exc:
        print(f"Error [{exc.code}]: {exc}", file=sys.stderr)
        return 1

    print()
    print("=== Decomposition Results ===")
    print(_format_plan(plan))
    print()
    print(f"Verification: Agent ID matches Session ID: {plan.id == session_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
