"""
Unit Tests for CLI Module

Tests argument parsing, configuration, display functions, and the
async entry point against a stubbed Cider server.
"""

import json
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from cider import __version__
from cider.cli import (
    async_main,
    build_config,
    create_parser,
    display_error,
    display_queue,
    format_duration,
    main,
)
from cider.exceptions import (
    CiderTransportError,
    NotReachableError,
    UnauthorizedError,
    UnexpectedResponseError,
)
from cider.models import QueueItem, QueueItemAttributes, QueueItemState
from cider_mocks import request_json, respond


class TestCreateParser:
    """Test suite for argument parser creation."""

    def test_program_name(self):
        assert create_parser().prog == "cider"

    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args([])

    def test_global_options(self):
        args = create_parser().parse_args(["--url", "http://10.0.0.5:10767", "--token", "tok", "-v", "play"])

        assert args.url == "http://10.0.0.5:10767"
        assert args.token == "tok"
        assert args.verbose is True
        assert args.command == "play"

    def test_defaults(self):
        args = create_parser().parse_args(["status"])

        assert args.url is None
        assert args.token is None
        assert args.verbose is False

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_volume_level_optional(self):
        parser = create_parser()

        assert parser.parse_args(["volume"]).level is None
        assert parser.parse_args(["volume", "0.4"]).level == 0.4

    def test_rate_choices(self):
        parser = create_parser()

        assert parser.parse_args(["rate", "-1"]).rating == -1
        with pytest.raises(SystemExit):
            parser.parse_args(["rate", "5"])


class TestBuildConfig:
    """Test configuration assembly from environment and flags."""

    def test_flags_override_environment(self, monkeypatch):
        monkeypatch.setenv("CIDER_BASE_URL", "http://192.168.1.20:10767")
        monkeypatch.setenv("CIDER_API_TOKEN", "env-token")
        args = create_parser().parse_args(["--token", "flag-token", "status"])

        config = build_config(args)

        assert config.base_url == "http://192.168.1.20:10767"
        assert config.api_token == "flag-token"

    def test_url_flag(self, monkeypatch):
        monkeypatch.delenv("CIDER_BASE_URL", raising=False)
        monkeypatch.delenv("CIDER_API_TOKEN", raising=False)
        args = create_parser().parse_args(["--url", "http://10.0.0.5:9999", "status"])

        config = build_config(args)

        assert config.base_url == "http://10.0.0.5:9999"
        assert config.api_token is None


class TestDisplay:
    """Test suite for display helpers."""

    @pytest.mark.parametrize("seconds,expected", [(234.0, "3:54"), (0, "0:00"), (59.9, "0:59"), (-3, "0:00")])
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_display_queue_marks_current(self, capsys):
        queue = [
            QueueItem(id="1", attributes=QueueItemAttributes(name="Say It", artist_name="Flume")),
            QueueItem(
                id="2",
                attributes=QueueItemAttributes(name="Never Be Like You", artist_name="Flume"),
                state=QueueItemState(current=2),
            ),
            QueueItem(id="3"),
        ]

        display_queue(queue)

        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "    1. Say It - Flume"
        assert lines[1] == ">   2. Never Be Like You - Flume"
        assert lines[2] == "    3. 3"

    def test_display_empty_queue(self, capsys):
        display_queue([])

        assert capsys.readouterr().out == "Queue is empty\n"

    @pytest.mark.parametrize(
        "error,expected",
        [
            (NotReachableError(), "not running or not reachable"),
            (UnauthorizedError(403), "rejected the API token"),
            (CiderTransportError("HTTP request failed: reset"), "Network error"),
            (UnexpectedResponseError("Unexpected response (HTTP 500)", status_code=500), "HTTP 500"),
        ],
    )
    def test_display_error(self, capsys, error, expected):
        display_error(error)

        assert expected in capsys.readouterr().out


class TestAsyncMain:
    """Test the async entry point end to end against a stub server."""

    @staticmethod
    def _args(*argv):
        return create_parser().parse_args(list(argv))

    @pytest.mark.asyncio
    async def test_now_playing(self, make_client, fixtures, capsys):
        client, _ = make_client(respond(200, fixtures["now_playing"]))

        exit_code = await async_main(self._args("now-playing"), client)

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "Never Be Like You - Flume" in out
        assert "Position: 0:42 / 3:54" in out
        assert "https://example.com/600x600bb.jpg" in out

    @pytest.mark.asyncio
    async def test_nothing_playing_is_not_a_failure(self, make_client, capsys):
        client, _ = make_client(respond(204))

        exit_code = await async_main(self._args("now-playing"), client)

        assert exit_code == 0
        assert capsys.readouterr().out == "Nothing playing\n"

    @pytest.mark.asyncio
    async def test_status(self, make_client, capsys):
        def handler(request):
            if request.url.path.endswith("/active"):
                return httpx.Response(204)
            return httpx.Response(200, json={"status": "ok", "is_playing": True})

        client, transport = make_client(handler)

        exit_code = await async_main(self._args("status"), client)

        assert exit_code == 0
        assert capsys.readouterr().out == "Cider is running (playing)\n"
        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "command,path",
        [("toggle", "/playpause"), ("next", "/next"), ("clear-queue", "/queue/clear-queue")],
    )
    async def test_simple_commands(self, make_client, command, path):
        client, transport = make_client(respond(200))

        exit_code = await async_main(self._args(command), client)

        assert exit_code == 0
        assert transport.last_request.method == "POST"
        assert transport.last_request.url.path == f"/api/v1/playback{path}"

    @pytest.mark.asyncio
    async def test_seek(self, make_client):
        client, transport = make_client(respond(200))

        assert await async_main(self._args("seek", "42"), client) == 0
        assert request_json(transport.last_request) == {"position": 42.0}

    @pytest.mark.asyncio
    async def test_volume_get_and_set(self, make_client, capsys):
        client, transport = make_client(respond(200, {"status": "ok", "volume": 0.5}))

        assert await async_main(self._args("volume"), client) == 0
        assert capsys.readouterr().out == "Volume: 0.50\n"

        assert await async_main(self._args("volume", "0.8"), client) == 0
        assert request_json(transport.last_request) == {"volume": 0.8}

    @pytest.mark.asyncio
    async def test_repeat_mode(self, make_client, capsys):
        client, _ = make_client(respond(200, {"status": "ok", "value": 1}))

        assert await async_main(self._args("repeat"), client) == 0
        assert capsys.readouterr().out == "Repeat: one\n"

    @pytest.mark.asyncio
    async def test_amapi_prints_json(self, make_client, fixtures, capsys):
        client, _ = make_client(respond(200, fixtures["amapi_search"]))

        assert await async_main(self._args("amapi", "/v1/catalog/us/search?term=flume"), client) == 0
        assert json.loads(capsys.readouterr().out) == fixtures["amapi_search"]

    @pytest.mark.asyncio
    async def test_unauthorized_exit_code(self, make_client, capsys):
        client, _ = make_client(respond(403))

        exit_code = await async_main(self._args("play"), client)

        assert exit_code == 1
        assert "rejected the API token" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_not_reachable_exit_code(self, make_client, capsys):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        client, _ = make_client(handler)

        exit_code = await async_main(self._args("status"), client)

        assert exit_code == 1
        assert "not running or not reachable" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_invalid_argument_exit_code(self, make_client, capsys):
        client, transport = make_client(respond(200))

        exit_code = await async_main(self._args("seek", "-5"), client)

        assert exit_code == 1
        assert "Invalid argument" in capsys.readouterr().out
        assert transport.requests == []


class TestMain:
    """Test suite for the synchronous entry point."""

    def test_returns_async_exit_code(self, mocker):
        mocker.patch("cider.cli.setup_logging")
        mocker.patch("cider.cli.async_main", new=AsyncMock(return_value=0))

        assert main(["play"]) == 0

    def test_keyboard_interrupt(self, mocker, capsys):
        mocker.patch("cider.cli.setup_logging")
        mocker.patch("cider.cli.async_main", new=Mock(return_value=None))
        mocker.patch("cider.cli.asyncio.run", side_effect=KeyboardInterrupt)

        assert main(["play"]) == 1
        assert "Interrupted" in capsys.readouterr().out
