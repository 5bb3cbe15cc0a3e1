"""Pipeline agents.

An agent owns an ordered list of stages and a private scratchpad. ``act``
feeds the stimulus through the stages strictly in registration order and
records the final output under ``"last_output"``.

Agents do not catch stage failures: the failing stage is wrapped in
StageFailureError and propagates to whoever called ``act`` (the environment
captures it per agent; the evaluator lets it through).
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol, Tuple, runtime_checkable

from .errors import InvalidArgumentError, StageFailureError
from .memory import Scratchpad, SharedMemory
from .stages import Stage, StageLike, as_stage

LAST_OUTPUT_KEY = "last_output"


@runtime_checkable
class Agent(Protocol):
    """Protocol for anything an Environment can run."""

    name: str

    def act(self, text: str, memory: SharedMemory) -> str:
        ...


class PipelineAgent:
    """Agent whose behaviour is a sequential pipeline of stages.

    Examples:
        Keyword bot:
            agent = PipelineAgent("KeywordBot")
            agent.add_stage(LowercaseStage())
            agent.add_stage(KeywordStage({"hello": "Hi there!"}))
            agent.add_stage(EchoStage())

        Plain function stage:
            PipelineAgent("EchoBot", [lambda text: "Echoing: " + text])
    """

    def __init__(
        self,
        name: str,
        stages: Optional[Iterable[StageLike]] = None,
        scratchpad: Optional[Scratchpad] = None,
    ):
        if not name:
            raise InvalidArgumentError("Agents need a non-empty name")
        self.name = name
        self._pipeline: list[Stage] = []
        self.scratchpad = scratchpad or Scratchpad()
        for stage in stages or ():
            self.add_stage(stage)

    @property
    def stages(self) -> Tuple[Stage, ...]:
        return tuple(self._pipeline)

    def add_stage(self, stage: StageLike) -> "PipelineAgent":
        """Append a stage (or plain callable) to the pipeline."""
        self._pipeline.append(as_stage(stage))
        return self

    def remember(self, key: str, value: Any) -> None:
        self.scratchpad.remember(key, value)

    def recall(self, key: str, default: Any = None) -> Any:
        return self.scratchpad.recall(key, default)

    def act(self, text: str, memory: SharedMemory) -> str:
        """Run the pipeline on ``text`` and return the final output.

        An empty pipeline returns ``text`` unchanged.

        Raises:
            StageFailureError: If any stage raises; later stages do not run
                and ``last_output`` keeps its previous value.
        """
        output = text
        for index, stage in enumerate(self._pipeline):
            try:
                output = stage.process(output, memory)
            except Exception as exc:
                raise StageFailureError(
                    agent_name=self.name,
                    stage_index=index,
                    stage_name=getattr(stage, "name", type(stage).__name__),
                    underlying=exc,
                ) from exc
        self.remember(LAST_OUTPUT_KEY, output)
        return output

    def __repr__(self) -> str:
        names = ", ".join(getattr(s, "name", type(s).__name__) for s in self._pipeline)
        return f"PipelineAgent({self.name!r}, stages=[{names}])"
