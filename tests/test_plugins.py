"""Tests for plugins."""

from agentpipe.agent import PipelineAgent
from agentpipe.memory import SharedMemory
from agentpipe.plugins import LoggingPlugin


def test_logging_plugin_prints_agent_name(capsys, monkeypatch):
    monkeypatch.setenv("AGENTPIPE_NO_COLOR", "1")
    plugin = LoggingPlugin()

    plugin.enhance(PipelineAgent("KeywordBot"), SharedMemory())

    out = capsys.readouterr().out
    assert out.strip() == "[+] Plugin applied to agent: KeywordBot"
    assert plugin.applied == ["KeywordBot"]


def test_agents_can_read_announcement():
    memory = SharedMemory()
    memory.put("message", "System update available")
    reader = PipelineAgent("Reader", [lambda text, mem: f"{text}: {mem.get('message')}"])

    assert reader.act("News", memory) == "News: System update available"

