"""Data models for the Cider RPC API."""

import os
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any, Dict, Optional, Tuple

from .transform import (
    enum_field,
    expect_object,
    object_list,
    optional_field,
    required_field,
    string_tuple,
)

DEFAULT_PORT = 10767
DEFAULT_BASE_URL = f"http://127.0.0.1:{DEFAULT_PORT}"


@dataclass(frozen=True)
class CiderConfig:
    """Configuration for connecting to a running Cider instance.

    Instances are immutable; the ``with_*`` methods return a new config.

    Attributes:
        base_url: Address of the Cider RPC server (default http://127.0.0.1:10767)
        api_token: Optional token from Settings > Connectivity > Manage
            External Application Access, sent in the ``apptoken`` header
    """

    base_url: str = DEFAULT_BASE_URL
    api_token: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        """Validate configuration on initialization."""
        if not self.base_url or not self.base_url.startswith(("http://", "https://")):
            raise ValueError("base_url must be a valid HTTP/HTTPS URL")

    @classmethod
    def for_port(cls, port: int) -> "CiderConfig":
        """Target Cider on localhost at a non-default port."""
        return cls(base_url=f"http://127.0.0.1:{port}")

    @classmethod
    def from_environment(cls) -> "CiderConfig":
        """Load configuration from environment variables.

        Reads ``CIDER_BASE_URL`` and ``CIDER_API_TOKEN``. Unset or empty
        variables fall back to the defaults.

        Returns:
            CiderConfig: Loaded configuration object

        Raises:
            ValueError: If CIDER_BASE_URL is not an HTTP/HTTPS URL
        """
        return cls(
            base_url=os.getenv("CIDER_BASE_URL") or DEFAULT_BASE_URL,
            api_token=os.getenv("CIDER_API_TOKEN") or None,
        )

    def with_token(self, token: Optional[str]) -> "CiderConfig":
        """Return a copy of this config using ``token`` for authentication."""
        return replace(self, api_token=token)

    def with_base_url(self, base_url: str) -> "CiderConfig":
        """Return a copy of this config targeting ``base_url``."""
        return replace(self, base_url=base_url)


class ShuffleMode(IntEnum):
    """Shuffle setting as reported by Cider."""

    OFF = 0
    ON = 1


class RepeatMode(IntEnum):
    """Repeat setting as reported by Cider."""

    OFF = 0
    ONE = 1
    ALL = 2


@dataclass(frozen=True)
class Artwork:
    """Artwork metadata for a track, album or station.

    ``url`` is a template that may contain ``{w}`` and ``{h}`` placeholders.
    The color fields are only sent for container artwork such as radio
    stations.

    Attributes:
        width: Source image width in pixels
        height: Source image height in pixels
        url: URL template
        text_color1: Primary text color (hex)
        text_color2: Secondary text color (hex)
        text_color3: Tertiary text color (hex)
        text_color4: Quaternary text color (hex)
        bg_color: Background color (hex)
        has_p3: Whether the image uses the Display P3 color space
    """

    width: int
    height: int
    url: str
    text_color1: Optional[str] = None
    text_color2: Optional[str] = None
    text_color3: Optional[str] = None
    text_color4: Optional[str] = None
    bg_color: Optional[str] = None
    has_p3: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Any) -> "Artwork":
        data = expect_object(data, "artwork")
        return cls(
            width=required_field(data, "width", int),
            height=required_field(data, "height", int),
            url=required_field(data, "url", str),
            text_color1=optional_field(data, "textColor1", str),
            text_color2=optional_field(data, "textColor2", str),
            text_color3=optional_field(data, "textColor3", str),
            text_color4=optional_field(data, "textColor4", str),
            bg_color=optional_field(data, "bgColor", str),
            has_p3=optional_field(data, "hasP3", bool),
        )

    def url_for_size(self, size: int) -> str:
        """Return the artwork URL with ``{w}`` and ``{h}`` replaced by ``size``.

        Args:
            size: Target edge length in pixels (square)

        Returns:
            Ready-to-fetch image URL. A template without placeholders is
            returned unchanged.

        Example:
            >>> art = Artwork(width=600, height=600, url="https://example.com/{w}x{h}bb.jpg")
            >>> art.url_for_size(300)
            'https://example.com/300x300bb.jpg'
        """
        dimension = str(size)
        return self.url.replace("{w}", dimension).replace("{h}", dimension)


@dataclass(frozen=True)
class PlayParams:
    """Identifies a playable item.

    Attributes:
        id: Apple Music catalog ID
        kind: Item kind ("song", "album", "radioStation", ...)
    """

    id: str
    kind: str

    @classmethod
    def from_dict(cls, data: Any) -> "PlayParams":
        data = expect_object(data, "playParams")
        return cls(id=required_field(data, "id", str), kind=required_field(data, "kind", str))


@dataclass(frozen=True)
class Preview:
    """Short AAC preview clip of a track."""

    url: str

    @classmethod
    def from_dict(cls, data: Any) -> "Preview":
        data = expect_object(data, "preview")
        return cls(url=required_field(data, "url", str))


def _play_params(data: Dict[str, Any]) -> Optional[PlayParams]:
    raw = data.get("playParams")
    return PlayParams.from_dict(raw) if raw is not None else None


def _previews(data: Dict[str, Any]) -> Tuple[Preview, ...]:
    return tuple(Preview.from_dict(item) for item in object_list(data, "previews"))


@dataclass(frozen=True)
class NowPlaying:
    """Currently playing track returned by ``GET /now-playing``.

    Apple Music catalog metadata enriched by Cider with live playback state.
    Playback times are reported verbatim; Cider may briefly report a
    position past the end of the track or below zero around seeks.

    Optional attributes are ``None`` when Cider omitted them, and keep
    falsy values (``0``, ``False``, ``""``) when Cider sent them.

    Attributes:
        name: Song name
        artist_name: Artist name
        album_name: Album name
        artwork: Artwork template
        duration_in_millis: Total duration in milliseconds
        current_playback_time: Current position in seconds
        remaining_time: Remaining time in seconds
        shuffle_mode: Shuffle setting
        repeat_mode: Repeat setting
        play_params: Catalog ID and kind (optional)
        url: Apple Music web URL (optional)
        isrc: International Standard Recording Code (optional)
        release_date: ISO-8601 release date (optional)
        audio_locale: Audio locale code, e.g. "en-US" (optional)
        composer_name: Composer / songwriter (optional)
        genre_names: Genre names, possibly empty
        audio_traits: Audio traits such as "lossless", possibly empty
        previews: Preview clips, possibly empty
    """

    name: str
    artist_name: str
    album_name: str
    artwork: Artwork
    duration_in_millis: int
    current_playback_time: float
    remaining_time: float
    shuffle_mode: ShuffleMode
    repeat_mode: RepeatMode

    # Identifiers
    play_params: Optional[PlayParams] = None
    url: Optional[str] = None
    isrc: Optional[str] = None

    # Catalog metadata
    release_date: Optional[str] = None
    audio_locale: Optional[str] = None
    composer_name: Optional[str] = None
    track_number: Optional[int] = None
    disc_number: Optional[int] = None
    in_favorites: Optional[bool] = None
    in_library: Optional[bool] = None
    has_lyrics: Optional[bool] = None
    has_time_synced_lyrics: Optional[bool] = None
    is_vocal_attenuation_allowed: Optional[bool] = None
    is_mastered_for_itunes: Optional[bool] = None
    is_apple_digital_master: Optional[bool] = None

    genre_names: Tuple[str, ...] = ()
    audio_traits: Tuple[str, ...] = ()
    previews: Tuple[Preview, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "NowPlaying":
        """Build from the ``info`` object of a now-playing response.

        Raises:
            PayloadError: If a required field is missing or mistyped
        """
        data = expect_object(data, "now playing info")
        return cls(
            name=required_field(data, "name", str),
            artist_name=required_field(data, "artistName", str),
            album_name=required_field(data, "albumName", str),
            artwork=Artwork.from_dict(required_field(data, "artwork", dict)),
            duration_in_millis=required_field(data, "durationInMillis", int),
            current_playback_time=required_field(data, "currentPlaybackTime", float),
            remaining_time=required_field(data, "remainingTime", float),
            shuffle_mode=enum_field(data, "shuffleMode", ShuffleMode),
            repeat_mode=enum_field(data, "repeatMode", RepeatMode),
            play_params=_play_params(data),
            url=optional_field(data, "url", str),
            isrc=optional_field(data, "isrc", str),
            release_date=optional_field(data, "releaseDate", str),
            audio_locale=optional_field(data, "audioLocale", str),
            composer_name=optional_field(data, "composerName", str),
            track_number=optional_field(data, "trackNumber", int),
            disc_number=optional_field(data, "discNumber", int),
            in_favorites=optional_field(data, "inFavorites", bool),
            in_library=optional_field(data, "inLibrary", bool),
            has_lyrics=optional_field(data, "hasLyrics", bool),
            has_time_synced_lyrics=optional_field(data, "hasTimeSyncedLyrics", bool),
            is_vocal_attenuation_allowed=optional_field(data, "isVocalAttenuationAllowed", bool),
            is_mastered_for_itunes=optional_field(data, "isMasteredForItunes", bool),
            is_apple_digital_master=optional_field(data, "isAppleDigitalMaster", bool),
            genre_names=string_tuple(data, "genreNames"),
            audio_traits=string_tuple(data, "audioTraits"),
            previews=_previews(data),
        )

    @property
    def song_id(self) -> Optional[str]:
        """Catalog song ID from ``play_params``, if present."""
        return self.play_params.id if self.play_params is not None else None

    def current_position_ms(self) -> int:
        """Current playback position in milliseconds (negative clamps to 0)."""
        return round(max(self.current_playback_time, 0.0) * 1000)

    def artwork_url(self, size: int) -> str:
        """Shorthand for ``self.artwork.url_for_size(size)``."""
        return self.artwork.url_for_size(size)


@dataclass(frozen=True)
class QueueItemAttributes:
    """Track metadata attached to a queue item.

    Same catalog fields as NowPlaying, but Cider omits whatever it does not
    know for queued items, so every scalar is optional.
    """

    name: Optional[str] = None
    artist_name: Optional[str] = None
    album_name: Optional[str] = None
    duration_in_millis: Optional[int] = None
    artwork: Optional[Artwork] = None
    play_params: Optional[PlayParams] = None
    url: Optional[str] = None
    isrc: Optional[str] = None
    release_date: Optional[str] = None
    audio_locale: Optional[str] = None
    composer_name: Optional[str] = None
    track_number: Optional[int] = None
    disc_number: Optional[int] = None
    has_lyrics: Optional[bool] = None
    has_time_synced_lyrics: Optional[bool] = None
    is_vocal_attenuation_allowed: Optional[bool] = None
    is_mastered_for_itunes: Optional[bool] = None
    is_apple_digital_master: Optional[bool] = None
    current_playback_time: Optional[float] = None
    remaining_time: Optional[float] = None
    genre_names: Tuple[str, ...] = ()
    audio_traits: Tuple[str, ...] = ()
    previews: Tuple[Preview, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "QueueItemAttributes":
        data = expect_object(data, "attributes")
        artwork = data.get("artwork")
        return cls(
            name=optional_field(data, "name", str),
            artist_name=optional_field(data, "artistName", str),
            album_name=optional_field(data, "albumName", str),
            duration_in_millis=optional_field(data, "durationInMillis", int),
            artwork=Artwork.from_dict(artwork) if artwork is not None else None,
            play_params=_play_params(data),
            url=optional_field(data, "url", str),
            isrc=optional_field(data, "isrc", str),
            release_date=optional_field(data, "releaseDate", str),
            audio_locale=optional_field(data, "audioLocale", str),
            composer_name=optional_field(data, "composerName", str),
            track_number=optional_field(data, "trackNumber", int),
            disc_number=optional_field(data, "discNumber", int),
            has_lyrics=optional_field(data, "hasLyrics", bool),
            has_time_synced_lyrics=optional_field(data, "hasTimeSyncedLyrics", bool),
            is_vocal_attenuation_allowed=optional_field(data, "isVocalAttenuationAllowed", bool),
            is_mastered_for_itunes=optional_field(data, "isMasteredForItunes", bool),
            is_apple_digital_master=optional_field(data, "isAppleDigitalMaster", bool),
            current_playback_time=optional_field(data, "currentPlaybackTime", float),
            remaining_time=optional_field(data, "remainingTime", float),
            genre_names=string_tuple(data, "genreNames"),
            audio_traits=string_tuple(data, "audioTraits"),
            previews=_previews(data),
        )


@dataclass(frozen=True)
class QueueItemState:
    """Playback state of a queue item; ``current == 2`` marks the active track."""

    current: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Any) -> "QueueItemState":
        data = expect_object(data, "_state")
        return cls(current=optional_field(data, "current", int))


@dataclass(frozen=True)
class QueueContainer:
    """Playlist, station or album a queue item was sourced from.

    ``attributes`` varies by container type and is kept as raw JSON.
    """

    id: Optional[str] = None
    container_type: Optional[str] = None
    href: Optional[str] = None
    name: Optional[str] = None
    attributes: Optional[Any] = None

    @classmethod
    def from_dict(cls, data: Any) -> "QueueContainer":
        data = expect_object(data, "_container")
        return cls(
            id=optional_field(data, "id", str),
            container_type=optional_field(data, "type", str),
            href=optional_field(data, "href", str),
            name=optional_field(data, "name", str),
            attributes=data.get("attributes"),
        )


@dataclass(frozen=True)
class QueueContext:
    """How an item ended up in the queue."""

    feature_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "QueueContext":
        data = expect_object(data, "_context")
        return cls(feature_name=optional_field(data, "featureName", str))


@dataclass(frozen=True)
class KeyUrls:
    """DRM key URLs for HLS playback, passed through untouched."""

    hls_key_cert_url: Optional[str] = None
    hls_key_server_url: Optional[str] = None
    widevine_cert_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "KeyUrls":
        data = expect_object(data, "keyURLs")
        return cls(
            hls_key_cert_url=optional_field(data, "hls-key-cert-url", str),
            hls_key_server_url=optional_field(data, "hls-key-server-url", str),
            widevine_cert_url=optional_field(data, "widevine-cert-url", str),
        )


def _nested(data: Dict[str, Any], key: str, model):
    raw = data.get(key)
    return model.from_dict(raw) if raw is not None else None


@dataclass(frozen=True)
class QueueItem:
    """One entry of the playback queue returned by ``GET /queue``.

    The queue holds history, the current track and upcoming items; use
    ``is_current()`` to find the active one. ``asset_url``, ``flavor``,
    ``hls_metadata``, ``assets`` and ``key_urls`` are Apple Music streaming
    internals and are not interpreted.
    """

    id: Optional[str] = None
    item_type: Optional[str] = None
    asset_url: Optional[str] = None
    hls_metadata: Optional[Any] = None
    flavor: Optional[str] = None
    attributes: Optional[QueueItemAttributes] = None
    playback_type: Optional[int] = None
    container: Optional[QueueContainer] = None
    context: Optional[QueueContext] = None
    state: Optional[QueueItemState] = None
    song_id: Optional[str] = None
    assets: Optional[Tuple[Any, ...]] = None
    key_urls: Optional[KeyUrls] = None

    @classmethod
    def from_dict(cls, data: Any) -> "QueueItem":
        data = expect_object(data, "queue item")
        assets = optional_field(data, "assets", list)
        return cls(
            id=optional_field(data, "id", str),
            item_type=optional_field(data, "type", str),
            asset_url=optional_field(data, "assetURL", str),
            hls_metadata=data.get("hlsMetadata"),
            flavor=optional_field(data, "flavor", str),
            attributes=_nested(data, "attributes", QueueItemAttributes),
            playback_type=optional_field(data, "playbackType", int),
            container=_nested(data, "_container", QueueContainer),
            context=_nested(data, "_context", QueueContext),
            state=_nested(data, "_state", QueueItemState),
            song_id=optional_field(data, "_songId", str),
            assets=tuple(assets) if assets is not None else None,
            key_urls=_nested(data, "keyURLs", KeyUrls),
        )

    def is_current(self) -> bool:
        """Return True if this is the currently playing item."""
        return self.state is not None and self.state.current == 2
