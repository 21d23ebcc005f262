"""
Unit tests for the CLI commands (run, languages, rooms).
"""

from unittest.mock import MagicMock, patch

import httpx
import pytest
import typer
from typer.testing import CliRunner

from coderoom.cli import app
from coderoom.cli._http import _http_get, _http_post

runner = CliRunner()


class TestCLIRoot:
    def test_help_shows_all_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "start" in result.output
        assert "run" in result.output
        assert "languages" in result.output
        assert "rooms" in result.output

    def test_rooms_help(self):
        result = runner.invoke(app, ["rooms", "--help"])
        assert result.exit_code == 0
        assert "list" in result.output
        assert "describe" in result.output
        assert "join" in result.output


class TestRunCommand:
    @patch("coderoom.cli.main._http_post")
    def test_run_infers_language(self, mock_post, tmp_path):
        source = tmp_path / "main.py"
        source.write_text("print(input())")
        mock_post.return_value = {"output": "hello\n", "status": "success"}

        result = runner.invoke(app, ["run", str(source), "--stdin", "hello"])

        assert result.exit_code == 0
        assert result.output == "hello\n"
        path, body = mock_post.call_args.args
        assert path == "/run"
        assert body == {"code": "print(input())", "language": "python", "input": "hello"}

    @patch("coderoom.cli.main._http_post")
    def test_run_explicit_language(self, mock_post, tmp_path):
        source = tmp_path / "snippet.txt"
        source.write_text("class Main {}")
        mock_post.return_value = {"output": "", "status": "success"}

        result = runner.invoke(app, ["run", str(source), "-l", "java"])

        assert result.exit_code == 0
        assert mock_post.call_args.args[1]["language"] == "java"

    @patch("coderoom.cli.main._http_post")
    def test_run_failure_exits_nonzero(self, mock_post, tmp_path):
        source = tmp_path / "main.py"
        source.write_text("1/0")
        mock_post.return_value = {
            "output": "ZeroDivisionError: division by zero\n",
            "status": "runtime-error",
        }

        result = runner.invoke(app, ["run", str(source)])

        assert result.exit_code == 1
        assert "ZeroDivisionError" in result.output

    def test_run_unknown_extension(self, tmp_path):
        source = tmp_path / "script.rb"
        source.write_text("puts 1")

        result = runner.invoke(app, ["run", str(source)])

        assert result.exit_code == 1
        assert "Cannot infer language" in result.output


class TestLanguagesCommand:
    @patch("coderoom.cli.main._http_get")
    def test_marks_default(self, mock_get):
        mock_get.return_value = {"languages": ["java", "python"], "default": "java"}

        result = runner.invoke(app, ["languages"])

        assert result.exit_code == 0
        assert "java (default)" in result.output
        assert "python" in result.output


class TestRoomsSubcommand:
    @patch("coderoom.cli.rooms._http_get")
    def test_list_empty(self, mock_get):
        mock_get.return_value = {"rooms": [], "count": 0}
        result = runner.invoke(app, ["rooms", "list"])
        assert result.exit_code == 0
        assert "No active rooms" in result.output

    @patch("coderoom.cli.rooms._http_get")
    def test_list_with_rooms(self, mock_get):
        mock_get.return_value = {
            "rooms": [
                {
                    "sessionId": "algo-club",
                    "language": "python",
                    "memberCount": 2,
                    "members": [],
                }
            ],
            "count": 1,
        }
        result = runner.invoke(app, ["rooms", "list"])
        assert result.exit_code == 0
        assert "algo-club" in result.output
        assert "python, 2 member(s)" in result.output

    @patch("coderoom.cli.rooms._http_get")
    def test_describe(self, mock_get):
        mock_get.return_value = {
            "sessionId": "algo-club",
            "language": "java",
            "memberCount": 1,
            "members": [{"connId": "c1", "displayName": "Ada"}],
        }
        result = runner.invoke(app, ["rooms", "describe", "algo-club"])

        assert result.exit_code == 0
        assert "Ada (c1)" in result.output
        mock_get.assert_called_once_with("/rooms/algo-club")

    @patch("coderoom.client.room_client.RoomClient.run")
    def test_join_gives_up(self, mock_run):
        from coderoom.errors import ChannelConnectError

        mock_run.side_effect = ChannelConnectError("Could not connect after 1 attempt(s)")

        result = runner.invoke(app, ["rooms", "join", "algo-club", "--name", "Ada"])

        assert result.exit_code == 1
        assert "Could not connect" in result.output


class TestHttpHelpers:
    @patch("httpx.request")
    def test_transport_error_exits_cleanly(self, mock_request):
        mock_request.side_effect = httpx.ReadError("connection reset")

        result = runner.invoke(app, ["languages"])

        assert result.exit_code == 1
        assert "❌ Error: connection reset" in result.output

    @patch("httpx.request")
    def test_non_json_body_exits_cleanly(self, mock_request):
        response = MagicMock()
        response.json.side_effect = ValueError("Expecting value")
        mock_request.return_value = response

        with pytest.raises(typer.Exit) as exc_info:
            _http_get("/languages")

        assert exc_info.value.exit_code == 1

    @patch("httpx.request")
    def test_connect_error_exits(self, mock_request):
        mock_request.side_effect = httpx.ConnectError("refused")

        with pytest.raises(typer.Exit):
            _http_post("/run", {"code": "print(1)"})
