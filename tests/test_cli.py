"""Tests for the command-line driver."""

import json

from agentpipe import cli
from agentpipe.cli import main
from agentpipe.config import Config


def test_demo_run_prints_rounds_accuracy_plugins_and_announcement(capsys, monkeypatch):
    monkeypatch.setenv("AGENTPIPE_NO_COLOR", "1")

    assert main([]) == 0

    out = capsys.readouterr().out
    lines = [line for line in out.splitlines() if line]
    expected_rounds = [
        "Stimulus: Hello world",
        "KeywordBot -> Agent says: Hi there!",
        "EchoBot -> Echoing: Hello world",
        "Stimulus: Random message",
        "KeywordBot -> Agent says: No action",
        "EchoBot -> Echoing: Random message",
        "Stimulus: Bye now",
        "KeywordBot -> Agent says: Goodbye!",
        "EchoBot -> Echoing: Bye now",
    ]
    assert lines[: len(expected_rounds)] == expected_rounds
    assert "KeywordBot accuracy: 1.0" in lines
    assert "[+] Plugin applied to agent: KeywordBot" in lines
    assert "[+] Plugin applied to agent: EchoBot" in lines
    assert "Shared memory message for agents: System update available" in lines


def test_stimulus_override_and_no_eval(capsys, monkeypatch):
    monkeypatch.setenv("AGENTPIPE_NO_COLOR", "1")

    assert main(["--stimulus", "bye bye", "--no-eval", "--workers", "2"]) == 0

    out = capsys.readouterr().out
    assert "KeywordBot -> Agent says: Goodbye!" in out
    assert "Hello world" not in out
    assert "accuracy" not in out


def test_custom_scenarios_dir(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("AGENTPIPE_NO_COLOR", "1")
    scenario = {
        "name": "solo",
        "agents": [{"name": "Shouty", "stages": [{"type": "echo", "prefix": "!! "}]}],
        "stimuli": ["hey"],
    }
    (tmp_path / "solo.json").write_text(json.dumps(scenario), encoding="utf-8")

    assert main(["--scenarios-dir", str(tmp_path), "--scenario", "solo"]) == 0
    assert "Shouty -> !! hey" in capsys.readouterr().out


def test_missing_scenario_exits_with_2(tmp_path, capsys):
    assert main(["--scenarios-dir", str(tmp_path), "--scenario", "ghost"]) == 2
    assert "not found" in capsys.readouterr().out


def test_invalid_worker_count_exits_with_2(capsys):
    assert main(["--workers", "0"]) == 2


def test_list_and_show_config(capsys):
    assert main(["--list"]) == 0
    assert "demo" in capsys.readouterr().out.split()

    assert main(["--show-config"]) == 0
    assert capsys.readouterr().out.startswith("Agentpipe Configuration:")


def test_invalid_env_config_exits_with_2(monkeypatch):
    monkeypatch.setattr(Config, "MAX_WORKERS", 0)

    assert main([]) == 2


def test_timeout_flag_only_overrides_config_when_given(capsys, monkeypatch):
    monkeypatch.setenv("AGENTPIPE_NO_COLOR", "1")
    monkeypatch.setattr(Config, "ROUND_TIMEOUT", 5.0)
    seen = []
    real_build = cli.build_environment

    def recording_build(scenario, **kwargs):
        env = real_build(scenario, **kwargs)
        seen.append(env.round_timeout)
        return env

    monkeypatch.setattr(cli, "build_environment", recording_build)

    assert main(["--no-eval"]) == 0
    assert main(["--no-eval", "--timeout", "1.5"]) == 0
    assert seen == [5.0, 1.5]
