"""
Tests for the command-line demo.
"""
import io

import pytest

from itemstore import cli
from itemstore.config import ENV_CONFIG_PATH, ENV_FETCH_DELAY, ENV_PRESET, StoreConfig
from itemstore.core.store import Store
from itemstore.loadable import Failed, Loaded, Loading, NotRequested
from itemstore.types import ApplicationState, ErrorInfo, Item


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, restore_root_logger):
    for name in (ENV_CONFIG_PATH, ENV_PRESET, ENV_FETCH_DELAY):
        monkeypatch.delenv(name, raising=False)


class TestRender:
    def test_phases(self):
        items = (Item.new("Foo"), Item.new("Bar"))
        assert cli.render(ApplicationState()) == "[not requested]"
        assert cli.render(ApplicationState(items=Loading())) == "[loading]"
        assert cli.render(ApplicationState(items=Loading(items))) == "[loading] Foo, Bar"
        assert cli.render(ApplicationState(items=Loaded(items))) == "[loaded] Foo, Bar"
        assert cli.render(ApplicationState(items=Failed(ErrorInfo("offline")))) == "[failed] offline"


class TestRunDemo:
    def test_walkthrough(self):
        store = Store(config=StoreConfig(fetch_delay_seconds=0.05))
        out = io.StringIO()
        try:
            final = cli.run_demo(store, out=out)
        finally:
            store.close()

        assert [i.name for i in final.items.value()] == ["Baz", "Bing"]
        lines = out.getvalue().splitlines()
        assert "repository_load " in lines[0]
        assert lines[1].endswith("[loading]")
        assert lines[-1].endswith("[loaded] Baz, Bing")

    def test_failed_fetch_skips_row_actions(self):
        store = cli._build_store(StoreConfig(fetch_delay_seconds=0.01), fail="offline")
        try:
            final = cli.run_demo(store, out=io.StringIO())
        finally:
            store.close()
        assert final.items.error().description == "offline"
        assert len(store.get_action_log()) == 3


class TestMain:
    def test_demo_succeeds(self, capsys):
        assert cli.main(["--delay", "0.01", "demo"]) == 0
        assert "Final: [loaded] Baz, Bing" in capsys.readouterr().out

    def test_default_command_is_demo(self, capsys):
        assert cli.main(["--preset", "fast"]) == 0
        assert "Final: [loaded]" in capsys.readouterr().out

    def test_demo_failure_exit_code(self, capsys):
        assert cli.main(["--delay", "0.01", "demo", "--fail", "offline"]) == 1
        assert "Final: [failed] offline" in capsys.readouterr().out

    def test_reference_preset(self, capsys):
        assert cli.main(["--preset", "reference", "--delay", "0.01"]) == 0
        out = capsys.readouterr().out
        assert "[loading]" not in out
        assert "Final: [loaded] Baz, Bing" in out

    def test_log_dir(self, tmp_path):
        assert cli.main(["--delay", "0.01", "--log-dir", str(tmp_path), "demo"]) == 0
        assert (tmp_path / "itemstore.log").exists()
        assert (tmp_path / "itemstore.json.log").exists()
