"""Exception hierarchy shared by stages, agents, and environments.

Failures inside a round are captured per agent and reported as error-marked
results; everything raised outside a round (evaluator, plugins, scenario
loading, configuration) propagates directly to the caller.
"""

from typing import Optional


class AgentPipeError(Exception):
    """Base class for all agentpipe errors."""


class InvalidArgumentError(AgentPipeError, ValueError):
    """Raised immediately for malformed input (empty test sets, bad config, ...)."""


class StageFailureError(AgentPipeError):
    """Raised when a pipeline stage fails while an agent is acting.

    The original exception is chained as ``__cause__`` so tracebacks keep the
    stage's own failure.
    """

    def __init__(
        self,
        *,
        agent_name: str,
        stage_index: int,
        stage_name: str,
        underlying: BaseException,
    ) -> None:
        self.agent_name = agent_name
        self.stage_index = stage_index
        self.stage_name = stage_name
        self.underlying = underlying
        super().__init__(
            f"Agent '{agent_name}' failed at stage {stage_index} ({stage_name}): "
            f"{type(underlying).__name__}: {underlying}"
        )


class AgentFailureError(AgentPipeError):
    """An agent could not produce a result for a round."""

    def __init__(self, *, agent_name: str, round_index: int, reason: str) -> None:
        self.agent_name = agent_name
        self.round_index = round_index
        self.reason = reason
        super().__init__(f"Agent '{agent_name}' failed in round {round_index}: {reason}")


class AgentTimeoutError(AgentFailureError):
    """Raised when an agent misses the round deadline."""

    def __init__(self, *, agent_name: str, round_index: int, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(
            agent_name=agent_name,
            round_index=round_index,
            reason=f"no result within {timeout:g}s",
        )


class AgentBusyError(AgentFailureError):
    """Raised when an agent is still acting on a previous, timed-out round.

    Worker threads cannot be interrupted, so the environment skips the agent
    rather than starting a second concurrent ``act`` call on it.
    """

    def __init__(
        self, *, agent_name: str, round_index: int, pending_round: Optional[int] = None
    ) -> None:
        self.pending_round = pending_round
        reason = "still running a previous round"
        if pending_round is not None:
            reason = f"still running round {pending_round}"
        super().__init__(agent_name=agent_name, round_index=round_index, reason=reason)


class EnvironmentClosedError(AgentPipeError):
    """Raised when an Environment is used after close()."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(
            f"Cannot {action}: environment is closed.\n"
            "Create a new Environment for further rounds."
        )
