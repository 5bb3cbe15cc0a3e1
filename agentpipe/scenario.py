"""
Scenario loading for JSON-defined simulations.

A scenario declares the agent population (each agent's stage pipeline), the
ordered stimuli to run as rounds, optional labelled test sets per agent, and
announcements to post into shared memory.

Design philosophy:
- Scenarios are data (JSON), not code
- Validation happens up front through the pydantic Scenario model
- Keyword rule order in the JSON object is the rule matching order

Scenario file structure:
```json
{
  "name": "demo",
  "description": "...",
  "agents": [
    {"name": "KeywordBot", "stages": [
      {"type": "lowercase"},
      {"type": "keyword", "rules": {"hello": "Hi there!"}},
      {"type": "echo"}
    ]}
  ],
  "stimuli": ["Hello world"],
  "test_sets": {"KeywordBot": [{"input": "hello friend", "expected": "Agent says: Hi there!"}]},
  "announcements": {"announcement": "System update available"}
}
```

Usage:
    scenario = ScenarioLoader().load("demo")
    env = build_environment(scenario)
    rounds = await env.run_rounds(scenario.stimuli)
"""

import json
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError

from .agent import PipelineAgent
from .config import Config
from .environment import Environment
from .errors import InvalidArgumentError
from .schemas import AgentSpec, Scenario
from .stages import build_stage


class ScenarioLoader:
    """Load and validate scenarios from JSON files.

    Directory structure:
    - Default: Config.SCENARIOS_DIR (the bundled ``agentpipe/scenarios``)
    - Override via constructor: ScenarioLoader(Path("/custom/scenarios"))
    - Scenario files: {scenario_name}.json (e.g., "demo.json")
    """

    def __init__(self, scenarios_dir: Optional[Path] = None):
        self.scenarios_dir = Path(scenarios_dir) if scenarios_dir else Config.SCENARIOS_DIR

    def load(self, scenario_name: str) -> Scenario:
        """Load a scenario by name.

        Args:
            scenario_name: Name of scenario without the .json extension

        Raises:
            FileNotFoundError: If the file does not exist in scenarios_dir
            InvalidArgumentError: If the file is not valid JSON or fails validation
        """
        scenario_path = self.scenarios_dir / f"{scenario_name}.json"

        if not scenario_path.exists():
            raise FileNotFoundError(
                f"Scenario '{scenario_name}' not found at {scenario_path}"
            )

        try:
            data = json.loads(scenario_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise InvalidArgumentError(
                f"Scenario '{scenario_name}' is not valid JSON: {exc}"
            ) from exc

        return self.parse(data, source=str(scenario_path))

    def parse(self, data: Any, source: str = "<data>") -> Scenario:
        """Validate already-decoded scenario data."""
        try:
            return Scenario.model_validate(data)
        except ValidationError as exc:
            raise InvalidArgumentError(f"Invalid scenario {source}:\n{exc}") from exc

    def available(self) -> List[str]:
        """Return the scenario names found in scenarios_dir."""
        if not self.scenarios_dir.is_dir():
            return []
        return sorted(path.stem for path in self.scenarios_dir.glob("*.json"))


def build_agent(spec: AgentSpec) -> PipelineAgent:
    return PipelineAgent(spec.name, [build_stage(stage) for stage in spec.stages])


def build_agents(scenario: Scenario) -> List[PipelineAgent]:
    """Build agents in the order the scenario lists them."""
    return [build_agent(spec) for spec in scenario.agents]


def build_environment(scenario: Scenario, **kwargs: Any) -> Environment:
    """Build an Environment with every scenario agent registered.

    Keyword arguments are passed to the Environment constructor.
    """
    return Environment(build_agents(scenario), **kwargs)


def load_scenario(scenario_name: str) -> Scenario:
    """Convenience function to load a scenario from the default directory."""
    loader = ScenarioLoader()
    return loader.load(scenario_name)
