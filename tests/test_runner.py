"""Tests for the TaskRunner.

Verifies:
1. Idempotence: changed on the first run, unchanged on the second.
2. Handlers run once, after the main sequence, in first-notified order.
3. Handler chains only continue when the handler changed something.
4. A fatal action error stops the run and skips every handler.
5. The first handler failure is reported and ends the drain.
"""

import pytest
from fakes import KeyValue, Recorder

from tsi_provision.engine.errors import (
    ApplyError,
    CheckError,
    HandlerError,
    UnknownHandlerError,
)
from tsi_provision.engine.runner import TaskRunner
from tsi_provision.model.result import Outcome
from tsi_provision.model.task import Action, Handler


def _outcomes(result):
    return [(o.name, o.outcome) for o in result.outcomes]


def test_same_action_twice_is_changed_then_unchanged(host):
    state = {}
    action = Action("write x", KeyValue("x", "a", state))

    first = TaskRunner(host).execute([action])
    assert _outcomes(first) == [("write x", Outcome.CHANGED)]
    after_first = dict(state)

    second = TaskRunner(host).execute([action])
    assert _outcomes(second) == [("write x", Outcome.UNCHANGED)]
    assert state == after_first
    assert state["_applied"] == ["x"]


def test_handler_notified_three_times_runs_once_after_all_actions(host):
    state = {}
    log = []
    reload_nginx = Handler("reload-nginx", Recorder("reload", log))
    actions = [
        Action(f"site {i}", KeyValue(f"site{i}", "on", state), notify=["reload-nginx"])
        for i in range(3)
    ]

    result = TaskRunner(host, [reload_nginx]).execute(actions)

    assert log == ["reload"]
    assert [o.name for o in result.outcomes] == ["site 0", "site 1", "site 2", "reload-nginx"]
    assert result.outcome_of("reload-nginx").is_handler


def test_handlers_run_in_first_notified_order(host):
    state = {}
    log = []
    handlers = [
        # registered in reverse notification order
        Handler("reload-nginx", Recorder("reload", log)),
        Handler("validate-config", Recorder("validate", log)),
    ]
    actions = [
        Action("A", KeyValue("a", "1", state), notify=["validate-config"]),
        Action("B", KeyValue("b", "1", state), notify=["reload-nginx"]),
    ]

    TaskRunner(host, handlers).execute(actions)

    assert log == ["validate", "reload"]


def test_unchanged_action_does_not_notify(host):
    state = {"a": "1"}
    log = []
    handler = Handler("reload", Recorder("reload", log))

    result = TaskRunner(host, [handler]).execute(
        [Action("A", KeyValue("a", "1", state), notify=["reload"])]
    )

    assert log == []
    assert result.outcome_of("reload") is None


def test_handler_chain_runs_second_handler_when_first_changed(host):
    log = []
    handlers = [
        Handler("validate", Recorder("validate", log), notify=["restart"]),
        Handler("restart", Recorder("restart", log)),
    ]
    action = Action("site", KeyValue("site", "on", {}), notify=["validate"])

    TaskRunner(host, handlers).execute([action])

    assert log == ["validate", "restart"]


def test_handler_chain_stops_when_first_handler_unchanged(host):
    log = []
    handlers = [
        Handler("validate", Recorder("validate", log, satisfied=True), notify=["restart"]),
        Handler("restart", Recorder("restart", log)),
    ]
    action = Action("site", KeyValue("site", "on", {}), notify=["validate"])

    result = TaskRunner(host, handlers).execute([action])

    assert log == []
    assert result.outcome_of("validate").outcome == Outcome.UNCHANGED
    assert result.outcome_of("restart") is None


def test_chained_handler_already_run_is_not_repeated(host):
    log = []
    handlers = [
        Handler("validate", Recorder("validate", log), notify=["reload"]),
        Handler("reload", Recorder("reload", log)),
    ]
    action = Action("site", KeyValue("site", "on", {}), notify=["reload", "validate"])

    TaskRunner(host, handlers).execute([action])

    assert log == ["reload", "validate"]


def test_apply_failure_stops_run_and_skips_handlers(host):
    state = {}
    log = []
    handler = Handler("H", Recorder("H", log))
    actions = [
        Action("one", KeyValue("one", "1", state), notify=["H"]),
        Action("two", KeyValue("two", "1", state), notify=["H"]),
        Action("three", KeyValue("three", "1", state, fail_apply=True)),
        Action("four", KeyValue("four", "1", state)),
        Action("five", KeyValue("five", "1", state)),
    ]

    result = TaskRunner(host, [handler]).execute(actions)

    assert result.failed
    assert isinstance(result.error, ApplyError)
    assert result.error.name == "three"
    assert "cannot write three" in str(result.error.cause)
    assert _outcomes(result) == [
        ("one", Outcome.CHANGED),
        ("two", Outcome.CHANGED),
        ("three", Outcome.FAILED),
    ]
    assert state["_applied"] == ["one", "two"]
    assert log == []
    assert result.exit_code == 1


def test_check_failure_is_fatal(host):
    state = {}
    actions = [
        Action("unreadable", KeyValue("a", "1", state, fail_check=True)),
        Action("after", KeyValue("b", "1", state)),
    ]

    result = TaskRunner(host).execute(actions)

    assert isinstance(result.error, CheckError)
    assert result.error.name == "unreadable"
    assert "b" not in state


def test_already_satisfied_handler_reported_unchanged_once(host):
    log = []
    handler = Handler("H", Recorder("H", log, satisfied=True))
    actions = [
        Action("first", KeyValue("a", "1", {}), notify=["H"]),
        Action("second", KeyValue("b", "1", {}), notify=["H"]),
    ]

    result = TaskRunner(host, [handler]).execute(actions)

    handler_outcomes = [o for o in result.outcomes if o.name == "H"]
    assert len(handler_outcomes) == 1
    assert handler_outcomes[0].outcome == Outcome.UNCHANGED
    assert log == []


def test_failed_handler_stops_remaining_handlers(host):
    log = []
    handlers = [
        Handler("validate", Recorder("validate", log, fail_apply=True), notify=["restart"]),
        Handler("reload", Recorder("reload", log)),
        Handler("restart", Recorder("restart", log)),
    ]
    action = Action("site", KeyValue("site", "on", {}), notify=["validate", "reload"])

    result = TaskRunner(host, handlers).execute([action])

    assert log == []
    assert not result.failed
    assert result.outcome_of("site").outcome == Outcome.CHANGED
    assert result.outcome_of("validate").outcome == Outcome.FAILED
    assert result.outcome_of("reload") is None
    assert result.outcome_of("restart") is None
    [error] = result.handler_failures
    assert isinstance(error, HandlerError)
    assert error.name == "validate"
    assert result.exit_code == 2


def test_handlers_before_the_failure_keep_their_outcome(host):
    log = []
    handlers = [
        Handler("reload", Recorder("reload", log)),
        Handler("validate", Recorder("validate", log, fail_apply=True)),
        Handler("restart", Recorder("restart", log)),
    ]
    action = Action("site", KeyValue("site", "on", {}), notify=["reload", "validate", "restart"])

    result = TaskRunner(host, handlers).execute([action])

    assert log == ["reload"]
    assert [o.name for o in result.outcomes if o.is_handler] == ["reload", "validate"]
    assert result.exit_code == 2


def test_dry_run_applies_nothing_but_previews_handlers(host):
    state = {}
    log = []
    handlers = [
        Handler("validate", Recorder("validate", log), notify=["restart"]),
        Handler("restart", Recorder("restart", log)),
    ]
    action = Action("site", KeyValue("site", "on", state), notify=["validate"])

    result = TaskRunner(host, handlers, dry_run=True).execute([action])

    assert state == {}
    assert log == []
    assert result.dry_run
    assert _outcomes(result) == [
        ("site", Outcome.CHANGED),
        ("validate", Outcome.CHANGED),
        ("restart", Outcome.CHANGED),
    ]
    assert result.outcome_of("site").detail == "would set site"


def test_unknown_handler_is_rejected_before_anything_runs(host):
    state = {}
    actions = [
        Action("fine", KeyValue("a", "1", state)),
        Action("typo", KeyValue("b", "1", state), notify=["relaod"]),
    ]

    with pytest.raises(UnknownHandlerError) as exc:
        TaskRunner(host).execute(actions)

    assert exc.value.handler == "relaod"
    assert state == {}


def test_duplicate_action_names_are_rejected(host):
    state = {}
    actions = [
        Action("write", KeyValue("a", "1", state)),
        Action("write", KeyValue("b", "1", state)),
    ]

    with pytest.raises(ValueError, match="Duplicate action name 'write'"):
        TaskRunner(host).execute(actions)
    assert state == {}


def test_on_outcome_sees_every_step_in_order(host):
    seen = []
    handler = Handler("H", Recorder("H", []))
    actions = [
        Action("a", KeyValue("a", "1", {}), notify=["H"]),
        Action("b", KeyValue("b", "1", {"b": "1"})),
    ]

    TaskRunner(host, {"H": handler}, on_outcome=lambda o: seen.append((o.name, o.outcome.value))).execute(actions)

    assert seen == [("a", "changed"), ("b", "unchanged"), ("H", "changed")]
