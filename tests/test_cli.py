"""
CLI command handling and loop tests.
"""

import builtins

import pytest

from convo_agent.api import cli
from convo_agent.core.types import Message


class TestHandleCommand:

    def test_regular_text_is_not_a_command(self, orchestrator):
        assert cli.handle_command(orchestrator, "calculate 1 + 1", "s1") == (None, "s1")

    @pytest.mark.parametrize("line", ["clear chat", "Empty Chat"])
    def test_clear_chat(self, orchestrator, line):
        orchestrator.session_store.append("s1", Message(role="user", content="x"))

        output, session_id = cli.handle_command(orchestrator, line, "s1")

        assert output == "Chat cleared."
        assert session_id == "s1"
        assert orchestrator.session_store.get("s1") is None

    def test_switch_session(self, orchestrator):
        output, session_id = cli.handle_command(orchestrator, "/session other", "s1")
        assert session_id == "other"
        assert "other" in output

    def test_show_session(self, orchestrator):
        output, session_id = cli.handle_command(orchestrator, "/session", "s1")
        assert session_id == "s1"
        assert output == "Active session: s1"


class TestMainLoop:

    def test_round_trip_until_exit(self, monkeypatch, capsys, settings):
        lines = iter(["", "calculate 2 + 2", "exit"])
        monkeypatch.setattr(builtins, "input", lambda prompt="": next(lines))
        monkeypatch.setattr(cli, "load_settings", lambda: settings)
        monkeypatch.setattr(cli, "configure_logging", lambda level: None)
        monkeypatch.setattr(cli, "_configure_stdout", lambda: None)

        cli.main()

        out = capsys.readouterr().out
        assert "Agent: 2 + 2 = 4" in out
        assert "Shutting down." in out

    def test_eof_ends_loop(self, monkeypatch, capsys, settings):
        def raise_eof(prompt=""):
            raise EOFError

        monkeypatch.setattr(builtins, "input", raise_eof)
        monkeypatch.setattr(cli, "load_settings", lambda: settings)
        monkeypatch.setattr(cli, "configure_logging", lambda level: None)
        monkeypatch.setattr(cli, "_configure_stdout", lambda: None)

        cli.main()

        assert "Knowledge chunks loaded: 2" in capsys.readouterr().out
