"""
Pydantic schemas for agentpipe.

Round results, evaluation reports, and declarative scenario definitions
are defined here.

Design Philosophy:
- Results always carry one entry per registered agent; failures are explicit
  error markers, never omitted entries
- Scenario models validate JSON input before any agent is built
- Exceptions travel alongside results but are excluded from serialisation
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ============================================================================
# Round Result Schemas
# ============================================================================

class AgentResult(BaseModel):
    """Outcome of one agent for one round: an output or an error marker."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    agent_name: str = Field(..., description="Name of the agent that produced this entry")
    output: Optional[str] = Field(None, description="Pipeline output when the agent succeeded")
    error: Optional[str] = Field(None, description="Error message when the agent failed")
    error_type: Optional[str] = Field(None, description="Exception class name for failures")
    duration_ms: float = Field(0.0, description="Wall-clock time spent waiting on this agent")
    # Original exception for callers that want to re-raise or inspect it.
    exception: Optional[BaseException] = Field(None, exclude=True, repr=False)

    @property
    def ok(self) -> bool:
        return self.error_type is None

    @classmethod
    def success(cls, agent_name: str, output: str, duration_ms: float = 0.0) -> "AgentResult":
        return cls(agent_name=agent_name, output=output, duration_ms=duration_ms)

    @classmethod
    def failure(
        cls, agent_name: str, exc: BaseException, duration_ms: float = 0.0
    ) -> "AgentResult":
        return cls(
            agent_name=agent_name,
            error=str(exc),
            error_type=type(exc).__name__,
            duration_ms=duration_ms,
            exception=exc,
        )

    def format_line(self) -> str:
        """Render as ``<agent> -> <result>`` (or an ERROR marker)."""
        if self.ok:
            return f"{self.agent_name} -> {self.output}"
        return f"{self.agent_name} -> ERROR {self.error_type}: {self.error}"


class RoundResult(BaseModel):
    """All agent outcomes for one stimulus, in agent registration order."""

    round_index: int = Field(..., ge=1, description="1-based round number within the environment")
    stimulus: str
    results: List[AgentResult] = Field(default_factory=list)
    started_at: datetime
    duration_ms: float = 0.0

    def outputs(self) -> Dict[str, str]:
        """Map agent name to output for agents that succeeded."""
        return {r.agent_name: r.output for r in self.results if r.ok}

    def failures(self) -> List[AgentResult]:
        return [r for r in self.results if not r.ok]

    def format_lines(self) -> List[str]:
        return [r.format_line() for r in self.results]


# ============================================================================
# Evaluation Schemas
# ============================================================================

class EvaluationCase(BaseModel):
    """Labelled input for accuracy scoring."""

    input: str
    expected: str


class EvaluationMismatch(BaseModel):
    input: str
    expected: str
    actual: str


class EvaluationReport(BaseModel):
    """Accuracy of one agent over a labelled test set (exact match only)."""

    agent_name: str
    total: int = Field(..., ge=1)
    correct: int = Field(..., ge=0)
    accuracy: float = Field(..., ge=0.0, le=1.0)
    mismatches: List[EvaluationMismatch] = Field(default_factory=list)


# ============================================================================
# Scenario Schemas
# ============================================================================

StageType = Literal["lowercase", "keyword", "echo"]


class StageSpec(BaseModel):
    """Declarative description of one pipeline stage.

    ``rules`` is only used by keyword stages and keeps the JSON object's
    order, which is also the rule matching order.
    """

    type: StageType
    rules: Dict[str, str] = Field(default_factory=dict)
    default: Optional[str] = Field(None, description="Keyword stage fallback response")
    prefix: Optional[str] = Field(None, description="Echo stage prefix")


class AgentSpec(BaseModel):
    name: str = Field(..., min_length=1)
    stages: List[StageSpec] = Field(default_factory=list)


class Scenario(BaseModel):
    """A complete simulation definition: agents, stimuli, and test sets."""

    name: str
    description: str = ""
    agents: List[AgentSpec] = Field(..., min_length=1)
    stimuli: List[str] = Field(default_factory=list)
    # Keyed by agent name
    test_sets: Dict[str, List[EvaluationCase]] = Field(default_factory=dict)
    # Written into shared memory after the rounds finish
    announcements: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("agents")
    @classmethod
    def _unique_agent_names(cls, agents: List[AgentSpec]) -> List[AgentSpec]:
        seen = set()
        for agent in agents:
            if agent.name in seen:
                raise ValueError(f"duplicate agent name '{agent.name}'")
            seen.add(agent.name)
        return agents

    @model_validator(mode="after")
    def _test_sets_reference_agents(self) -> "Scenario":
        names = {agent.name for agent in self.agents}
        unknown = sorted(set(self.test_sets) - names)
        if unknown:
            raise ValueError(f"test_sets reference unknown agents: {', '.join(unknown)}")
        return self
