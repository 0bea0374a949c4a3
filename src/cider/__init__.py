"""Async client module for the Cider music player RPC API."""

__version__ = "1.0.0"

from .client import CiderClient
from .exceptions import (
    CiderError,
    CiderTransportError,
    ErrorKind,
    NothingPlayingError,
    NotReachableError,
    UnauthorizedError,
    UnexpectedResponseError,
)
from .models import (
    DEFAULT_BASE_URL,
    DEFAULT_PORT,
    Artwork,
    CiderConfig,
    KeyUrls,
    NowPlaying,
    PlayParams,
    Preview,
    QueueContainer,
    QueueContext,
    QueueItem,
    QueueItemAttributes,
    QueueItemState,
    RepeatMode,
    ShuffleMode,
)

__all__ = [
    # Client
    "CiderClient",
    # Configuration
    "CiderConfig",
    "DEFAULT_BASE_URL",
    "DEFAULT_PORT",
    # Models
    "Artwork",
    "KeyUrls",
    "NowPlaying",
    "PlayParams",
    "Preview",
    "QueueContainer",
    "QueueContext",
    "QueueItem",
    "QueueItemAttributes",
    "QueueItemState",
    "RepeatMode",
    "ShuffleMode",
    # Exceptions
    "ErrorKind",
    "CiderError",
    "CiderTransportError",
    "NotReachableError",
    "UnauthorizedError",
    "NothingPlayingError",
    "UnexpectedResponseError",
]
