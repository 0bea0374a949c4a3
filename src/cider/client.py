"""Async HTTP client for the Cider RPC API."""

import logging
import math
import socket
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

import httpx

from .exceptions import (
    CiderTransportError,
    NothingPlayingError,
    NotReachableError,
    UnauthorizedError,
    UnexpectedResponseError,
)
from .models import CiderConfig, NowPlaying, QueueItem, RepeatMode, ShuffleMode
from .transform import PayloadError, coerce, enum_field, expect_object, required_field

logger = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

PLAYBACK_PREFIX = "/api/v1/playback"
AMAPI_PATH = "/api/v1/amapi/run-v3"

# Cider's application token header; it is not an Authorization/Bearer scheme.
TOKEN_HEADER = "apptoken"


def _is_name_resolution_failure(exc: BaseException) -> bool:
    """Walk the exception chain looking for a DNS lookup failure."""
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, socket.gaierror):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


def _payload_field(key: str, expected: type) -> Callable[[Any], Any]:
    """Build a parser reading one field of a ``{"status": "ok", ...}`` payload."""

    def parse(data: Any) -> Any:
        return required_field(expect_object(data, "response"), key, expected)

    return parse


def _setting(enum_cls: Type[E]) -> Callable[[Any], E]:
    """Parser for `{"status": "ok", "value": n}` settings payloads."""

    def parse(data: Any) -> E:
        return enum_field(expect_object(data, "response"), "value", enum_cls)

    return parse


def _parse_now_playing(data: Any) -> NowPlaying:
    return NowPlaying.from_dict(_payload_field("info", dict)(data))


def _parse_queue(data: Any) -> List[QueueItem]:
    items = coerce("queue", data, list)
    return [QueueItem.from_dict(item) for item in items]


def _check_index(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")


def _check_finite(name: str, value: float) -> None:
    if isinstance(value, bool) or not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number, got {value!r}")


def _check_identifier(name: str, value: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{name} must be a non-empty string")


class CiderClient:
    """Async client for the Cider music player RPC API.

    Talks to Cider's local HTTP server (default ``http://127.0.0.1:10767``)
    to query playback state and control playback, the queue, volume and
    settings.

    Every call is an independent request: an ``httpx.AsyncClient`` is opened
    for the duration of the call and closed afterwards, so many calls can be
    awaited concurrently on one client and an abandoned call leaves nothing
    behind. The client itself only holds its read-only configuration.

    Failures are raised as subclasses of ``CiderError``; ``error.kind`` is
    one of the ``ErrorKind`` members:

    - ``NOT_REACHABLE``: connection refused or timed out (Cider not running)
    - ``TRANSPORT``: any other network failure
    - ``UNAUTHORIZED``: HTTP 401/403
    - ``NOTHING_PLAYING``: ``now_playing()`` found no loaded track
    - ``UNEXPECTED_RESPONSE``: other HTTP errors or malformed payloads

    Attributes:
        config: CiderConfig with the server address and optional token

    Example:
        >>> client = CiderClient(CiderConfig().with_token("my-token"))
        >>> try:
        ...     track = await client.now_playing()
        ...     print(f"{track.name} - {track.artist_name}")
        ... except NothingPlayingError:
        ...     print("Nothing playing")
    """

    def __init__(
        self,
        config: Optional[CiderConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Cider API client.

        Args:
            config: Connection settings (default: localhost:10767, no token)
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``
                in tests
        """
        self.config = config if config is not None else CiderConfig()
        self._base_url = self.config.base_url.rstrip("/")
        self._transport = transport

        logger.debug(f"Initialized Cider client for {self._base_url}")

    def with_token(self, token: Optional[str]) -> "CiderClient":
        """Return a new client that authenticates with ``token``."""
        return CiderClient(self.config.with_token(token), transport=self._transport)

    def _build_url(self, path: str) -> str:
        """Build full URL for an API path (e.g. "/api/v1/playback/active")."""
        return f"{self._base_url}{path}"

    def _build_headers(self) -> Dict[str, str]:
        """Authentication header for the request, empty when no token is set."""
        if not self.config.api_token:
            return {}
        return {TOKEN_HEADER: self.config.api_token}

    async def _send(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """Send a request and classify transport and status failures.

        Args:
            method: HTTP method
            path: Absolute API path
            body: Optional JSON request body

        Returns:
            Response with a 2xx status

        Raises:
            NotReachableError: Connection could not be established
            CiderTransportError: Any other network failure
            UnauthorizedError: HTTP 401 or 403
            UnexpectedResponseError: Any other non-2xx status
        """
        url = self._build_url(path)
        logger.debug(f"{method} {url}")

        try:
            async with httpx.AsyncClient(transport=self._transport) as http:
                response = await http.request(method, url, json=body, headers=self._build_headers())
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            if _is_name_resolution_failure(e):
                logger.warning(f"Could not resolve Cider host for {url}: {e}")
                raise CiderTransportError(f"Name resolution failed for {url}: {e}", cause=e) from e
            logger.warning(f"Cider not reachable at {self._base_url}: {e!r}")
            raise NotReachableError() from e
        except httpx.RequestError as e:
            logger.warning(f"Request to {url} failed: {e!r}")
            raise CiderTransportError(f"HTTP request failed: {e}", cause=e) from e

        status = response.status_code
        logger.debug(f"Response status: {status}")

        if status in (401, 403):
            raise UnauthorizedError(status)
        if not response.is_success:
            logger.error(f"Unexpected response from {method} {url} (HTTP {status})")
            raise UnexpectedResponseError(
                f"Unexpected response (HTTP {status})", status_code=status, body=response.text
            )
        return response

    def _decode(self, response: httpx.Response) -> Any:
        """Decode a JSON payload, treating an empty body as a contract mismatch."""
        if not response.content.strip():
            raise UnexpectedResponseError(
                f"Expected a JSON payload but the body was empty (HTTP {response.status_code})",
                status_code=response.status_code,
                body="",
            )
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {response.request.url}: {e}")
            raise UnexpectedResponseError(
                f"Response is not valid JSON: {e}",
                status_code=response.status_code,
                body=response.text,
            ) from e

    def _parse(self, response: httpx.Response, parser: Callable[[Any], T]) -> T:
        """Decode a payload and build the expected model from it."""
        data = self._decode(response)
        try:
            return parser(data)
        except PayloadError as e:
            logger.error(f"Unexpected payload from {response.request.url}: {e}")
            raise UnexpectedResponseError(
                f"Unexpected payload: {e}",
                status_code=response.status_code,
                body=response.text,
            ) from e

    async def _command(self, path: str, body: Optional[Dict[str, Any]] = None) -> None:
        """POST a playback command; any 2xx response counts as success."""
        await self._send("POST", f"{PLAYBACK_PREFIX}{path}", body)

    async def _query(self, path: str, parser: Callable[[Any], T]) -> T:
        """GET a playback endpoint and parse its payload."""
        response = await self._send("GET", f"{PLAYBACK_PREFIX}{path}")
        return self._parse(response, parser)

    # Status

    async def is_active(self) -> None:
        """Check that Cider is running and the RPC server is reachable.

        Sends ``GET /active``; Cider answers ``204 No Content`` when alive.

        Raises:
            NotReachableError: If Cider is not running
            UnauthorizedError: If the token is wrong
        """
        logger.debug("Checking Cider connection")
        await self._send("GET", f"{PLAYBACK_PREFIX}/active")

    async def is_playing(self) -> bool:
        """Return True if music is currently playing."""
        return await self._query("/is-playing", _payload_field("is_playing", bool))

    async def now_playing(self) -> NowPlaying:
        """Get the currently playing track.

        Returns:
            NowPlaying with catalog metadata and live playback state

        Raises:
            NothingPlayingError: If no track is loaded (2xx with no body)
            UnexpectedResponseError: If the payload does not describe a track
        """
        response = await self._send("GET", f"{PLAYBACK_PREFIX}/now-playing")
        if not response.content.strip():
            logger.debug("Nothing playing")
            raise NothingPlayingError(response.status_code)
        return self._parse(response, _parse_now_playing)

    # Playback control

    async def play(self) -> None:
        """Resume playback."""
        await self._command("/play")

    async def pause(self) -> None:
        """Pause the current track. No-op if already paused."""
        await self._command("/pause")

    async def play_pause(self) -> None:
        """Toggle between playing and paused."""
        await self._command("/playpause")

    async def stop(self) -> None:
        """Stop playback and unload the current track. The queue is kept."""
        await self._command("/stop")

    async def next(self) -> None:
        """Skip to the next track in the queue."""
        await self._command("/next")

    async def previous(self) -> None:
        """Go back to the previously played track."""
        await self._command("/previous")

    async def seek(self, position_secs: float) -> None:
        """Seek to a position in the current track.

        Args:
            position_secs: Target offset in seconds

        Raises:
            ValueError: If the position is negative or not finite
        """
        _check_finite("position_secs", position_secs)
        if position_secs < 0:
            raise ValueError(f"position_secs must be a non-negative number, got {position_secs!r}")
        await self._command("/seek", {"position": float(position_secs)})

    async def seek_ms(self, position_ms: int) -> None:
        """Seek to a position given in milliseconds.

        Cider takes seconds on the wire, so 30000 is sent as 30.0.

        Raises:
            ValueError: If the position is not a non-negative integer
        """
        _check_index("position_ms", position_ms)
        await self.seek(position_ms / 1000)

    # Play items

    async def play_url(self, url: str) -> None:
        """Start playback of an Apple Music URL (music.apple.com/...)."""
        _check_identifier("url", url)
        await self._command("/play-url", {"url": url})

    async def play_item(self, item_type: str, item_id: str) -> None:
        """Start playback of an item by type ("songs", "albums", ...) and catalog ID."""
        _check_identifier("item_type", item_type)
        _check_identifier("item_id", item_id)
        await self._command("/play-item", {"type": item_type, "id": item_id})

    async def play_item_href(self, href: str) -> None:
        """Start playback of an item by Apple Music API href."""
        _check_identifier("href", href)
        await self._command("/play-item-href", {"href": href})

    async def play_next(self, item_type: str, item_id: str) -> None:
        """Add an item to the start of the queue."""
        _check_identifier("item_type", item_type)
        _check_identifier("item_id", item_id)
        await self._command("/play-next", {"type": item_type, "id": item_id})

    async def play_later(self, item_type: str, item_id: str) -> None:
        """Add an item to the end of the queue."""
        _check_identifier("item_type", item_type)
        _check_identifier("item_id", item_id)
        await self._command("/play-later", {"type": item_type, "id": item_id})

    # Queue

    async def get_queue(self) -> List[QueueItem]:
        """Get the playback queue.

        The list includes history, the current track and upcoming items; use
        ``QueueItem.is_current()`` to find the active track. Cider answers
        ``204 No Content`` when the queue is empty.
        """
        response = await self._send("GET", f"{PLAYBACK_PREFIX}/queue")
        if response.status_code == 204:
            logger.debug("Queue is empty")
            return []
        return self._parse(response, _parse_queue)

    async def queue_move_to_position(self, start_index: int, destination_index: int) -> None:
        """Move a queue item. Indices are 1-based and include history items."""
        _check_index("start_index", start_index)
        _check_index("destination_index", destination_index)
        await self._command(
            "/queue/move-to-position",
            {"startIndex": start_index, "destinationIndex": destination_index},
        )

    async def queue_remove_by_index(self, index: int) -> None:
        """Remove a queue item by its 1-based index."""
        _check_index("index", index)
        await self._command("/queue/remove-by-index", {"index": index})

    async def clear_queue(self) -> None:
        await self._command("/queue/clear-queue")

    # Volume

    async def get_volume(self) -> float:
        """Get the current volume (0.0 muted, 1.0 full)."""
        return await self._query("/volume", _payload_field("volume", float))

    async def set_volume(self, volume: float) -> None:
        """Set the volume. Values are clamped to 0.0..1.0.

        Raises:
            ValueError: If the volume is NaN or infinite
        """
        _check_finite("volume", volume)
        await self._command("/volume", {"volume": min(max(float(volume), 0.0), 1.0)})

    # Library / ratings

    async def add_to_library(self) -> None:
        """Add the current track to the library. No-op if already there."""
        await self._command("/add-to-library")

    async def set_rating(self, rating: int) -> None:
        """Rate the current track: -1 dislike, 0 unset, 1 like (clamped)."""
        await self._command("/set-rating", {"rating": min(max(int(rating), -1), 1)})

    # Repeat / shuffle / autoplay

    async def get_repeat_mode(self) -> RepeatMode:
        return await self._query("/repeat-mode", _setting(RepeatMode))

    async def toggle_repeat(self) -> None:
        """Cycle repeat mode: repeat one, repeat all, off."""
        await self._command("/toggle-repeat")

    async def get_shuffle_mode(self) -> ShuffleMode:
        return await self._query("/shuffle-mode", _setting(ShuffleMode))

    async def toggle_shuffle(self) -> None:
        await self._command("/toggle-shuffle")

    async def get_autoplay(self) -> bool:
        return await self._query("/autoplay", _payload_field("value", bool))

    async def toggle_autoplay(self) -> None:
        await self._command("/toggle-autoplay")

    # Apple Music API passthrough

    async def amapi_run_v3(self, path: str) -> Any:
        """Run a raw Apple Music API request through Cider.

        Sends ``POST /api/v1/amapi/run-v3`` and returns the decoded JSON
        untouched. Status and transport failures are classified exactly as
        for the typed calls.

        Args:
            path: Apple Music API path, e.g.
                "/v1/catalog/us/search?term=flume&types=songs"

        Returns:
            Decoded JSON value from Apple Music
        """
        _check_identifier("path", path)
        response = await self._send("POST", AMAPI_PATH, {"path": path})
        return self._decode(response)

