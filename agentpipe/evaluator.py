"""Accuracy scoring for a single agent.

Runs the agent sequentially over a labelled test set (this is a scoring
utility, not a round) and counts exact string matches. Agent failures
propagate to the caller.
"""

from typing import Iterable, List, Mapping, Tuple, Union

from .agent import Agent
from .errors import InvalidArgumentError
from .memory import SharedMemory
from .schemas import EvaluationCase, EvaluationMismatch, EvaluationReport

LabelledCases = Union[
    Mapping[str, str],
    Iterable[Union[EvaluationCase, Tuple[str, str]]],
]


def _normalize(test_set: LabelledCases) -> List[EvaluationCase]:
    if isinstance(test_set, Mapping):
        return [EvaluationCase(input=k, expected=v) for k, v in test_set.items()]
    cases: List[EvaluationCase] = []
    for case in test_set:
        if isinstance(case, EvaluationCase):
            cases.append(case)
        else:
            text, expected = case
            cases.append(EvaluationCase(input=text, expected=expected))
    return cases


def evaluate(agent: Agent, test_set: LabelledCases, memory: SharedMemory) -> EvaluationReport:
    """Score ``agent`` against ``test_set`` and return a detailed report.

    Args:
        agent: Agent to run (its private memory is updated as usual)
        test_set: Mapping of input -> expected output, or a sequence of
            EvaluationCase / (input, expected) pairs
        memory: SharedMemory the agent's stages read and write

    Raises:
        InvalidArgumentError: If the test set is empty
    """
    cases = _normalize(test_set)
    if not cases:
        raise InvalidArgumentError(
            f"Cannot evaluate agent '{agent.name}': the test set is empty"
        )

    correct = 0
    mismatches: List[EvaluationMismatch] = []
    for case in cases:
        actual = agent.act(case.input, memory)
        if actual == case.expected:
            correct += 1
        else:
            mismatches.append(
                EvaluationMismatch(input=case.input, expected=case.expected, actual=actual)
            )

    return EvaluationReport(
        agent_name=agent.name,
        total=len(cases),
        correct=correct,
        accuracy=correct / len(cases),
        mismatches=mismatches,
    )


def evaluate_accuracy(agent: Agent, test_set: LabelledCases, memory: SharedMemory) -> float:
    """Return the fraction of test cases the agent answers exactly."""
    return evaluate(agent, test_set, memory).accuracy
