"""Tests for scenario loading via ScenarioLoader."""

import json

import pytest

from agentpipe.errors import InvalidArgumentError
from agentpipe.scenario import ScenarioLoader, build_agents, build_environment, load_scenario


def _write(tmp_path, name, data):
    path = tmp_path / f"{name}.json"
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


def test_bundled_demo_scenario_loads():
    scenario = load_scenario("demo")

    assert [agent.name for agent in scenario.agents] == ["KeywordBot", "EchoBot"]
    assert scenario.stimuli == ["Hello world", "Random message", "Bye now"]
    assert list(scenario.agents[0].stages[1].rules) == ["hello", "bye"]
    assert len(scenario.test_sets["KeywordBot"]) == 2
    assert scenario.announcements == {"announcement": "System update available"}
    assert "demo" in ScenarioLoader().available()


@pytest.mark.asyncio
async def test_demo_environment_runs():
    scenario = load_scenario("demo")
    with build_environment(scenario, verbose=False) as env:
        result = await env.run_round(scenario.stimuli[0])

    assert result.outputs() == {
        "KeywordBot": "Agent says: Hi there!",
        "EchoBot": "Echoing: Hello world",
    }


def test_build_agents_keeps_order_and_stages(tmp_path):
    _write(
        tmp_path,
        "pair",
        {
            "name": "pair",
            "agents": [
                {"name": "Second", "stages": []},
                {"name": "First", "stages": [{"type": "echo", "prefix": "> "}]},
            ],
        },
    )
    scenario = ScenarioLoader(tmp_path).load("pair")
    agents = build_agents(scenario)

    assert [agent.name for agent in agents] == ["Second", "First"]
    assert agents[0].stages == ()
    assert len(agents[1].stages) == 1


def test_missing_scenario_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ScenarioLoader(tmp_path).load("nope")


def test_invalid_json_raises(tmp_path):
    _write(tmp_path, "broken", "{not json")

    with pytest.raises(InvalidArgumentError):
        ScenarioLoader(tmp_path).load("broken")


@pytest.mark.parametrize(
    "data",
    [
        {"name": "x", "agents": []},
        {"name": "x", "agents": [{"name": "A"}, {"name": "A"}]},
        {"name": "x", "agents": [{"name": "A", "stages": [{"type": "teleport"}]}]},
        {
            "name": "x",
            "agents": [{"name": "A"}],
            "test_sets": {"Ghost": [{"input": "a", "expected": "b"}]},
        },
    ],
    ids=["no-agents", "duplicate-names", "unknown-stage", "unknown-test-set-agent"],
)
def test_invalid_scenarios_rejected(tmp_path, data):
    _write(tmp_path, "bad", data)

    with pytest.raises(InvalidArgumentError):
        ScenarioLoader(tmp_path).load("bad")


def test_available_lists_json_files(tmp_path):
    _write(tmp_path, "b", {"name": "b", "agents": [{"name": "A"}]})
    _write(tmp_path, "a", {"name": "a", "agents": [{"name": "A"}]})

    assert ScenarioLoader(tmp_path).available() == ["a", "b"]
    assert ScenarioLoader(tmp_path / "missing").available() == []
