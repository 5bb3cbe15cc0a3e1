"""
Round orchestration.

The Environment binds an append-only list of agents to one SharedMemory and
one worker pool, and runs rounds:

1. Schedule one task per agent (registration order) on the worker pool
2. Let every agent's pipeline run concurrently with its siblings
3. Wait for every task to finish (the round barrier)
4. Report one entry per agent in registration order, whatever the
   completion order was
5. Capture each agent's failure as an error marker without touching the
   other agents' results

Rounds never overlap: ``run_rounds`` awaits each round's barrier before the
next stimulus is scheduled.
"""

import asyncio
import time
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from .agent import Agent
from .config import Config
from .errors import (
    AgentBusyError,
    AgentTimeoutError,
    EnvironmentClosedError,
    InvalidArgumentError,
)
from .logging_utils import (
    LOG_TAG_ERROR,
    LOG_TAG_PLUGIN,
    log_error,
    log_plugin,
    log_round,
    log_success,
)
from .memory import SharedMemory
from .plugins import Plugin
from .schemas import AgentResult, RoundResult


RoundListener = Callable[[RoundResult], None]

# Default for constructor arguments whose None has its own meaning
_FROM_CONFIG = object()


def _drain(future: "asyncio.Future") -> None:
    # Timed-out agents finish after nobody awaits them; retrieve the
    # exception so asyncio does not log it as never retrieved.
    if not future.cancelled():
        future.exception()


class Environment:
    """
    Execution context for a fixed population of agents.

    Owns the SharedMemory and a ThreadPoolExecutor created at construction and
    released by ``close()`` (or by leaving a ``with``/``async with`` block).
    """

    def __init__(
        self,
        agents: Optional[Iterable[Agent]] = None,
        *,
        max_workers: Optional[int] = None,
        round_timeout: Union[Optional[float], object] = _FROM_CONFIG,
        round_listeners: Optional[List[RoundListener]] = None,
        verbose: Optional[bool] = None,
    ):
        """Initialize environment.

        Args:
            agents: Optional agents to register immediately, in order
            max_workers: Worker pool size (defaults to Config.MAX_WORKERS)
            round_timeout: Optional per-agent deadline in seconds
                (defaults to Config.ROUND_TIMEOUT; pass None to wait forever
                even when AGENTPIPE_ROUND_TIMEOUT is set)
            round_listeners: Optional callables invoked with each RoundResult
                after the round completes
            verbose: Print ``<agent> -> <result>`` lines per round
                (defaults to Config.VERBOSE)
        """
        self.max_workers = Config.MAX_WORKERS if max_workers is None else max_workers
        if self.max_workers < 1:
            raise InvalidArgumentError(f"max_workers must be >= 1 (got {self.max_workers})")

        if round_timeout is _FROM_CONFIG:
            round_timeout = Config.ROUND_TIMEOUT
        self.round_timeout: Optional[float] = round_timeout
        if self.round_timeout is not None and self.round_timeout <= 0:
            raise InvalidArgumentError(
                f"round_timeout must be positive when set (got {self.round_timeout})"
            )

        self.verbose = Config.VERBOSE if verbose is None else verbose
        self.round_listeners: List[RoundListener] = list(round_listeners or [])

        self._agents: List[Agent] = []
        self._shared = SharedMemory()
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="agentpipe-worker"
        )
        # Slot index -> (round index, future) of the most recent act() call.
        # Used to refuse a second concurrent act() after a timeout.
        self._in_flight: Dict[int, Tuple[int, Future]] = {}
        self._rounds_run = 0
        self._closed = False

        for agent in agents or ():
            self.add_agent(agent)

    # ------------------------------------------------------------------
    # Registration and accessors
    # ------------------------------------------------------------------

    def add_agent(self, agent: Agent) -> None:
        """Register an agent; its position fixes its place in every report."""
        self._ensure_open("add an agent")
        if not getattr(agent, "name", None) or not callable(getattr(agent, "act", None)):
            raise InvalidArgumentError(
                f"{agent!r} is not an agent (needs a non-empty 'name' and an 'act' method)"
            )
        if any(existing is agent for existing in self._agents):
            raise InvalidArgumentError(f"Agent '{agent.name}' is already registered")
        self._agents.append(agent)

    @property
    def agents(self) -> Tuple[Agent, ...]:
        return tuple(self._agents)

    @property
    def shared_memory(self) -> SharedMemory:
        return self._shared

    @property
    def rounds_run(self) -> int:
        return self._rounds_run

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    async def run_rounds(self, stimuli: Iterable[str]) -> List[RoundResult]:
        """Run one round per stimulus, in order, each fully completing first."""
        results: List[RoundResult] = []
        for stimulus in stimuli:
            results.append(await self.run_round(stimulus))
        return results

    async def run_round(self, stimulus: str) -> RoundResult:
        """Run every registered agent on ``stimulus`` concurrently.

        Returns:
            RoundResult with exactly one AgentResult per registered agent,
            in registration order. Failed agents carry an error marker.

        Raises:
            EnvironmentClosedError: If close() was already called
        """
        self._ensure_open("run a round")
        self._rounds_run += 1
        round_index = self._rounds_run
        agents = tuple(self._agents)

        if self.verbose:
            log_round(f"\nStimulus: {stimulus}")

        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()

        # One task per agent. return_exceptions=True keeps the barrier intact
        # even if a task wrapper itself fails; every entry is resolved below.
        outcomes = await asyncio.gather(
            *[
                self._run_agent(slot, agent, stimulus, round_index)
                for slot, agent in enumerate(agents)
            ],
            return_exceptions=True,
        )

        results: List[AgentResult] = []
        for agent, outcome in zip(agents, outcomes):
            if isinstance(outcome, BaseException):
                outcome = AgentResult.failure(agent.name, outcome)
            results.append(outcome)

        round_result = RoundResult(
            round_index=round_index,
            stimulus=stimulus,
            results=results,
            started_at=started_at,
            duration_ms=(time.perf_counter() - start) * 1000.0,
        )

        if self.verbose:
            self._print_round_summary(round_result)

        # Listener failures are logged but don't abort the run.
        for listener in self.round_listeners:
            try:
                listener(round_result)
            except Exception as exc:
                log_error(f"  {LOG_TAG_ERROR} [Round {round_index}] Listener failed: {exc}")

        return round_result

    async def _run_agent(
        self, slot: int, agent: Agent, stimulus: str, round_index: int
    ) -> AgentResult:
        """Run one agent's act() on the pool and capture its outcome."""
        start = time.perf_counter()

        def elapsed_ms() -> float:
            return (time.perf_counter() - start) * 1000.0

        previous = self._in_flight.get(slot)
        if previous is not None and not previous[1].done():
            busy = AgentBusyError(
                agent_name=agent.name, round_index=round_index, pending_round=previous[0]
            )
            return AgentResult.failure(agent.name, busy, elapsed_ms())

        try:
            work = self._executor.submit(agent.act, stimulus, self._shared)
        except RuntimeError as exc:  # pool shut down underneath us
            return AgentResult.failure(agent.name, exc, elapsed_ms())
        self._in_flight[slot] = (round_index, work)

        future = asyncio.wrap_future(work)
        if self.round_timeout is None:
            await asyncio.wait({future})
        else:
            done, _ = await asyncio.wait({future}, timeout=self.round_timeout)
            if future not in done:
                future.add_done_callback(_drain)
                timeout = AgentTimeoutError(
                    agent_name=agent.name,
                    round_index=round_index,
                    timeout=self.round_timeout,
                )
                return AgentResult.failure(agent.name, timeout, elapsed_ms())

        if future.cancelled():  # close() cancelled it before a worker picked it up
            closed = EnvironmentClosedError("finish the round")
            return AgentResult.failure(agent.name, closed, elapsed_ms())
        exc = future.exception()
        if exc is not None:
            return AgentResult.failure(agent.name, exc, elapsed_ms())
        return AgentResult.success(agent.name, future.result(), elapsed_ms())

    def _print_round_summary(self, round_result: RoundResult) -> None:
        for result in round_result.results:
            if result.ok:
                log_success(result.format_line())
            else:
                log_error(result.format_line())

    # ------------------------------------------------------------------
    # Plugins
    # ------------------------------------------------------------------

    def apply_plugin(self, plugin: Plugin) -> None:
        """Invoke ``plugin.enhance`` once per agent, in registration order.

        Runs outside any round; plugin errors propagate to the caller.
        """
        self._ensure_open("apply a plugin")
        if self.verbose:
            log_plugin(f"{LOG_TAG_PLUGIN} Applying {type(plugin).__name__}")
        for agent in self._agents:
            plugin.enhance(agent, self._shared)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self, wait: bool = True) -> None:
        """Shut down the worker pool. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=True)

    async def aclose(self) -> None:
        """Close from async code; waits for busy workers off the event loop."""
        if self._closed:
            return
        self._closed = True
        await asyncio.to_thread(self._executor.shutdown, wait=True, cancel_futures=True)

    def _ensure_open(self, action: str) -> None:
        if self._closed:
            raise EnvironmentClosedError(action)

    def __enter__(self) -> "Environment":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def __aenter__(self) -> "Environment":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        names = ", ".join(agent.name for agent in self._agents)
        return f"Environment(agents=[{names}], rounds_run={self._rounds_run})"
