"""Command-line driver.

Loads a scenario, runs one round per stimulus and prints
``<agent> -> <result>`` lines in registration order, then scores agents that
have a test set, applies the logging plugin, and posts the scenario's
announcements into shared memory.

RUN:
    agentpipe                       # bundled demo scenario
    agentpipe --stimulus "hello there" --stimulus "bye"
    python -m agentpipe --scenarios-dir ./my_scenarios --scenario team
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from .config import Config
from .errors import InvalidArgumentError
from .evaluator import evaluate
from .logging_utils import LOG_TAG_ERROR, LOG_TAG_INFO, log_error, log_info
from .plugins import LoggingPlugin
from .scenario import ScenarioLoader, build_environment


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="agentpipe", description="Run a multi-agent pipeline simulation"
    )
    parser.add_argument("--scenario", default="demo", help="Scenario name (default: demo)")
    parser.add_argument(
        "--scenarios-dir",
        type=Path,
        default=None,
        help="Directory holding <scenario>.json files",
    )
    parser.add_argument(
        "--stimulus",
        action="append",
        default=None,
        help="Stimulus to run instead of the scenario's list (repeatable)",
    )
    parser.add_argument("--workers", type=int, default=None, help="Worker pool size")
    parser.add_argument(
        "--timeout", type=float, default=None, help="Per-agent round timeout in seconds"
    )
    parser.add_argument("--no-eval", action="store_true", help="Skip accuracy evaluation")
    parser.add_argument("--list", action="store_true", help="List available scenarios and exit")
    parser.add_argument("--show-config", action="store_true", help="Print configuration and exit")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    loader = ScenarioLoader(args.scenarios_dir)

    if args.show_config:
        print(Config.display())
        return 0
    if args.list:
        for name in loader.available():
            print(name)
        return 0

    Config.validate()
    scenario = loader.load(args.scenario)
    stimuli = args.stimulus if args.stimulus else scenario.stimuli

    options = {"max_workers": args.workers, "verbose": True}
    if args.timeout is not None:
        options["round_timeout"] = args.timeout

    async with build_environment(scenario, **options) as env:
        rounds = await env.run_rounds(stimuli)
        failures = sum(len(r.failures()) for r in rounds)
        if failures:
            log_error(f"\n{LOG_TAG_ERROR} {failures} agent failure(s) across {len(rounds)} round(s)")

        if not args.no_eval:
            agents = {agent.name: agent for agent in env.agents}
            for agent_name, cases in scenario.test_sets.items():
                report = evaluate(agents[agent_name], cases, env.shared_memory)
                print(f"\n{agent_name} accuracy: {report.accuracy}")

        print()
        env.apply_plugin(LoggingPlugin())

        # Agents communicate through shared memory
        for key, message in scenario.announcements.items():
            env.shared_memory.put(key, message)
            print(f"\nShared memory message for agents: {env.shared_memory.get(key)}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        return asyncio.run(run(args))
    except (InvalidArgumentError, FileNotFoundError) as exc:
        log_error(f"{LOG_TAG_ERROR} {exc}")
        log_info(f"{LOG_TAG_INFO} Use --list to see available scenarios.")
        return 2


if __name__ == "__main__":
    sys.exit(main())
