"""
Tests for StateDiff and the debug reducer wrapper.
"""
import logging

from itemstore.core.state.actions import repository_load_action, row_delete_action
from itemstore.core.state.reducer import reduce_state
from itemstore.debug import StateDiff, debug_reducer
from itemstore.loadable import Failed, Loaded, Loading
from itemstore.types import ApplicationState, ErrorInfo, Item


def loaded(*names):
    return ApplicationState(items=Loaded(tuple(Item.new(n) for n in names)))


class TestStateDiff:
    def test_identical_states(self):
        state = loaded("Foo", "Bar")
        diff = StateDiff.compute(state, state)
        assert diff.is_empty
        assert diff.summary() == "No state changes."

    def test_phase_and_generation_change(self):
        old = ApplicationState()
        new = ApplicationState(items=Loading(), load_generation=1)
        diff = StateDiff.compute(old, new)

        assert diff.changes["items.phase"] == ("not_requested", "loading")
        assert diff.changes["load_generation"] == (0, 1)
        assert "items.phase: not_requested -> loading" in diff.summary()

    def test_item_lists_compared_by_name(self):
        old = loaded("Foo", "Bar", "Baz")
        new = old.with_items(Loaded(old.items.value()[1:]))
        diff = StateDiff.compute(old, new)
        assert diff.changes["items.value"] == (["Foo", "Bar", "Baz"], ["Bar", "Baz"])

    def test_error_appears(self):
        old = ApplicationState(items=Loading())
        new = old.with_items(Failed(ErrorInfo("offline")))
        diff = StateDiff.compute(old, new)
        assert diff.changes["items.error.description"] == (None, "offline")


class TestDebugReducer:
    def test_returns_wrapped_result(self):
        wrapped = debug_reducer(reduce_state)
        state = loaded("Foo", "Bar")
        action = row_delete_action([0])
        assert wrapped(state, action) == reduce_state(state, action)

    def test_logs_action_diff_and_command(self, caplog):
        wrapped = debug_reducer(reduce_state, log=logging.getLogger("itemstore.test_debug"))
        with caplog.at_level(logging.DEBUG, logger="itemstore.test_debug"):
            wrapped(ApplicationState(), repository_load_action())

        messages = [r.message for r in caplog.records]
        assert messages[0].startswith("received action: ")
        assert "repository_load" in messages[0]
        assert messages[1].startswith("State Changes:")
        assert messages[2].startswith("emitted command: ")
