"""
Example: Agents Talking Through Shared Memory
=============================================

WHAT THIS SHOWS:
- Building agents in code (no scenario file)
- Stages that read and write SharedMemory
- A round listener printing per-round bookkeeping
- Failure isolation: one agent breaks, the others still report

RUN:
    python examples/shared_counter/run.py
"""

import asyncio

from agentpipe import (
    EchoStage,
    Environment,
    KeywordStage,
    LowercaseStage,
    PipelineAgent,
)


def count_visit(text, memory):
    visits = memory.update("visits", lambda n: n + 1, default=0)
    return f"{text} (visit #{visits})"


def read_last_greeting(text, memory):
    return memory.get("last_greeting", "nobody greeted yet")


def remember_greeting(text, memory):
    if text != "No action":
        memory.put("last_greeting", text)
    return text


def picky(text):
    if "bye" in text.lower():
        raise ValueError("refusing to say goodbye")
    return text


async def main():
    greeter = PipelineAgent(
        "Greeter",
        [
            LowercaseStage(),
            KeywordStage({"hello": "Hi there!", "bye": "Goodbye!"}),
            remember_greeting,
            EchoStage(),
        ],
    )
    counter = PipelineAgent("Counter", [count_visit])
    gossip = PipelineAgent("Gossip", [read_last_greeting, EchoStage("Heard: ")])
    fussy = PipelineAgent("Fussy", [picky, EchoStage("Fussy: ")])

    def summary(round_result):
        ok = len(round_result.results) - len(round_result.failures())
        print(f"  [round {round_result.round_index}] {ok}/{len(round_result.results)} ok")

    async with Environment(
        [greeter, counter, gossip, fussy],
        max_workers=4,
        round_listeners=[summary],
        verbose=True,
    ) as env:
        await env.run_rounds(["Hello world", "Random message", "Bye now"])
        print(f"\nTotal visits: {env.shared_memory.get('visits')}")


if __name__ == "__main__":
    asyncio.run(main())
