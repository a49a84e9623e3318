from __future__ import annotations

import asyncio
import logging

import pytest

from core.domain.errors import ChainInvariantError, ParseError
from core.domain.models import CachePolicy, GraphQLResponse
from core.domain.operations import check_email_reserved
from core.services.request_chain import ChainExecution, HTTPRequest


class Stage:
    def __init__(self, name: str, log: list[str], action: str = "proceed") -> None:
        self.name = name
        self.log = log
        self.action = action

    async def intercept(self, execution, proceed):
        self.log.append(self.name)
        if self.action == "proceed":
            await proceed()
        elif self.action == "respond":
            execution.response = GraphQLResponse(data={"stage": self.name})
            await proceed()
        elif self.action == "complete":
            execution.complete(GraphQLResponse(data={"stage": self.name}))
        elif self.action == "complete_twice":
            execution.complete(GraphQLResponse(data={}))
            execution.complete(GraphQLResponse(data={}))
        elif self.action == "proceed_twice":
            await proceed()
            await proceed()
        elif self.action == "raise":
            raise ParseError("bad payload")
        elif self.action == "rewind_once":
            if execution.context.get("rewound"):
                await proceed()
            else:
                execution.context["rewound"] = True
                await execution.rewind("b")()
        # "stall": neither proceeds nor completes


def _execution(*stages) -> ChainExecution:
    return ChainExecution(
        operation=check_email_reserved("a@b.com"),
        cache_policy=CachePolicy.default(),
        interceptors=stages,
        request=HTTPRequest(url="http://localhost/graphql"),
    )


def test_stages_run_in_declared_order():
    log: list[str] = []
    execution = _execution(Stage("a", log), Stage("b", log), Stage("c", log, "complete"))

    result = asyncio.run(execution.run())

    assert result.ok
    assert result.value.data == {"stage": "c"}
    assert log == ["a", "b", "c"]
    assert execution.trace == ["a", "b", "c"]


def test_stage_can_short_circuit():
    log: list[str] = []
    execution = _execution(Stage("a", log), Stage("b", log, "complete"), Stage("c", log))

    result = asyncio.run(execution.run())

    assert result.value.data == {"stage": "b"}
    assert log == ["a", "b"]


def test_past_last_stage_completes_with_accreted_response():
    log: list[str] = []
    execution = _execution(Stage("a", log, "respond"), Stage("b", log))

    result = asyncio.run(execution.run())

    assert result.value.data == {"stage": "a"}


def test_continuation_called_twice_is_an_invariant_violation():
    log: list[str] = []
    execution = _execution(Stage("a", log, "proceed_twice"), Stage("b", log, "complete"))

    with pytest.raises(ChainInvariantError):
        asyncio.run(execution.run())


def test_completing_twice_is_an_invariant_violation():
    execution = _execution(Stage("a", [], "complete_twice"))

    with pytest.raises(ChainInvariantError):
        asyncio.run(execution.run())


def test_chain_that_never_completes_is_an_invariant_violation():
    execution = _execution(Stage("a", []), Stage("b", [], "stall"))

    with pytest.raises(ChainInvariantError):
        asyncio.run(execution.run())


def test_client_error_raised_by_a_stage_becomes_a_failure():
    log: list[str] = []
    execution = _execution(Stage("a", log), Stage("b", log, "raise"), Stage("c", log))

    result = asyncio.run(execution.run())

    assert isinstance(result.error, ParseError)
    assert log == ["a", "b"]


def test_rewind_runs_later_stages_again():
    log: list[str] = []
    execution = _execution(Stage("a", log), Stage("b", log, "respond"), Stage("c", log, "rewind_once"))

    result = asyncio.run(execution.run())

    assert result.ok
    assert execution.trace == ["a", "b", "c", "b", "c"]


def test_rewind_to_unknown_stage_fails_loudly():
    execution = _execution(Stage("a", []))

    with pytest.raises(ChainInvariantError):
        execution.rewind("nope")


def test_execution_runs_once():
    execution = _execution(Stage("a", [], "complete"))
    asyncio.run(execution.run())

    with pytest.raises(ChainInvariantError):
        asyncio.run(execution.run())


def test_empty_chain_is_rejected():
    with pytest.raises(ChainInvariantError):
        _execution()


def test_stage_entries_are_logged_with_their_position(caplog):
    log: list[str] = []
    execution = _execution(Stage("a", log), Stage("b", log, "complete"))

    with caplog.at_level(logging.DEBUG, logger="core.services.request_chain"):
        asyncio.run(execution.run())

    messages = [record.getMessage() for record in caplog.records]
    assert "-> #0 a [CheckEmailReserved]" in messages
    assert "-> #1 b [CheckEmailReserved]" in messages
