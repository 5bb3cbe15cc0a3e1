"""Tests for accuracy evaluation."""

import pytest

from agentpipe.agent import PipelineAgent
from agentpipe.errors import InvalidArgumentError, StageFailureError
from agentpipe.evaluator import evaluate, evaluate_accuracy
from agentpipe.memory import SharedMemory
from agentpipe.schemas import EvaluationCase
from agentpipe.stages import EchoStage, KeywordStage, LowercaseStage


@pytest.fixture
def keyword_bot():
    return PipelineAgent(
        "KeywordBot",
        [LowercaseStage(), KeywordStage({"hello": "Hi there!", "bye": "Goodbye!"}), EchoStage()],
    )


def test_all_cases_match(keyword_bot):
    test_set = {
        "hello friend": "Agent says: Hi there!",
        "bye everyone": "Agent says: Goodbye!",
    }

    assert evaluate_accuracy(keyword_bot, test_set, SharedMemory()) == 1.0


def test_no_cases_match(keyword_bot):
    test_set = [("hello friend", "Hi there!"), ("bye everyone", "Goodbye!")]

    assert evaluate_accuracy(keyword_bot, test_set, SharedMemory()) == 0.0


def test_partial_report_lists_mismatches(keyword_bot):
    cases = [
        EvaluationCase(input="Hello there", expected="Agent says: Hi there!"),
        EvaluationCase(input="what now", expected="Agent says: Goodbye!"),
    ]

    report = evaluate(keyword_bot, cases, SharedMemory())

    assert report.agent_name == "KeywordBot"
    assert report.total == 2
    assert report.correct == 1
    assert report.accuracy == 0.5
    assert len(report.mismatches) == 1
    assert report.mismatches[0].actual == "Agent says: No action"


def test_exact_match_only_no_partial_credit(keyword_bot):
    assert evaluate_accuracy(keyword_bot, {"hello": "agent says: hi there!"}, SharedMemory()) == 0.0


@pytest.mark.parametrize("empty", [{}, [], ()])
def test_empty_test_set_raises(keyword_bot, empty):
    with pytest.raises(InvalidArgumentError):
        evaluate_accuracy(keyword_bot, empty, SharedMemory())


def test_agent_failures_propagate():
    def explode(text):
        raise RuntimeError("no")

    agent = PipelineAgent("Broken", [explode])

    with pytest.raises(StageFailureError):
        evaluate_accuracy(agent, {"x": "y"}, SharedMemory())
