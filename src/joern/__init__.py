"""joern — async client SDK for the Joern query server."""

from joern.client.client import ConnectionState, JoernClient
from joern.client.stream import Receiver, StopReason
from joern.client.tracker import CompletionTracker
from joern.config import ClientConfig
from joern.errors import (
    CancellationError,
    ConnectionError,
    DecodeError,
    JoernError,
    RemoteError,
    TransportError,
)
from joern.models import QueryResult
from joern.protocol import CONNECTED

__all__ = [
    "CONNECTED",
    "CancellationError",
    "ClientConfig",
    "CompletionTracker",
    "ConnectionError",
    "ConnectionState",
    "DecodeError",
    "JoernClient",
    "JoernError",
    "QueryResult",
    "Receiver",
    "RemoteError",
    "StopReason",
    "TransportError",
]
