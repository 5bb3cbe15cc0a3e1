"""
Agentpipe - concurrent multi-agent pipeline simulation library.

Agents transform a stimulus through an ordered pipeline of stages and
communicate indirectly through a thread-safe SharedMemory. An Environment
runs every agent concurrently per round and reports results in
registration order.

No file I/O required. No global state. All collaborators injected by user.
"""

__version__ = "0.1.0"

# Main simulation components
from .environment import Environment

# Core building blocks
from .memory import SharedMemory, Scratchpad
from .agent import Agent, PipelineAgent, LAST_OUTPUT_KEY
from .stages import (
    Stage,
    FunctionStage,
    LowercaseStage,
    KeywordStage,
    EchoStage,
    as_stage,
    build_stage,
)
from .plugins import Plugin, LoggingPlugin
from .evaluator import evaluate, evaluate_accuracy

# Schemas
from .schemas import (
    AgentResult,
    RoundResult,
    EvaluationCase,
    EvaluationMismatch,
    EvaluationReport,
    StageSpec,
    AgentSpec,
    Scenario,
)

# Errors
from .errors import (
    AgentPipeError,
    InvalidArgumentError,
    StageFailureError,
    AgentFailureError,
    AgentTimeoutError,
    AgentBusyError,
    EnvironmentClosedError,
)

# Scenario loader helpers
from .scenario import (
    ScenarioLoader,
    load_scenario,
    build_agent,
    build_agents,
    build_environment,
)

__all__ = [
    # Main class
    "Environment",
    # Building blocks
    "SharedMemory",
    "Scratchpad",
    "Agent",
    "PipelineAgent",
    "LAST_OUTPUT_KEY",
    "Stage",
    "FunctionStage",
    "LowercaseStage",
    "KeywordStage",
    "EchoStage",
    "as_stage",
    "build_stage",
    "Plugin",
    "LoggingPlugin",
    "evaluate",
    "evaluate_accuracy",
    # Schemas
    "AgentResult",
    "RoundResult",
    "EvaluationCase",
    "EvaluationMismatch",
    "EvaluationReport",
    "StageSpec",
    "AgentSpec",
    "Scenario",
    # Errors
    "AgentPipeError",
    "InvalidArgumentError",
    "StageFailureError",
    "AgentFailureError",
    "AgentTimeoutError",
    "AgentBusyError",
    "EnvironmentClosedError",
    # Scenario helpers
    "ScenarioLoader",
    "load_scenario",
    "build_agent",
    "build_agents",
    "build_environment",
]
