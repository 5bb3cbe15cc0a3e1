"""Plugins: cross-cutting hooks applied to agents outside of rounds.

A plugin's ``enhance`` is called once per agent (see
``Environment.apply_plugin``). It returns nothing and must not assume it runs
before or after any particular round.
"""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

from .logging_utils import LOG_TAG_PLUGIN, log_plugin
from .memory import SharedMemory

if TYPE_CHECKING:  # pragma: no cover
    from .agent import Agent


class Plugin(Protocol):
    """Protocol for plugins."""

    def enhance(self, agent: "Agent", memory: SharedMemory) -> None:
        ...


class LoggingPlugin:
    """Announce every agent the plugin is applied to."""

    def __init__(self) -> None:
        self.applied: list[str] = []

    def enhance(self, agent: "Agent", memory: SharedMemory) -> None:
        self.applied.append(agent.name)
        log_plugin(f"{LOG_TAG_PLUGIN} Plugin applied to agent: {agent.name}")

