"""Shared constants for client ↔ Joern server communication."""

DEFAULT_BASE_URL = "localhost:8080"
DEFAULT_BUFFER_SIZE = 36
DEFAULT_TIMEOUT = 3600.0

HTTP_SCHEME = "http"
WS_SCHEME = "ws"

# REST endpoints
EP_QUERY = "/query"
EP_RESULT = "/result"

# WebSocket
WS_CONNECT = "/connect"

# First frame pushed on the WebSocket once the server has accepted it
CONNECTED = "connected"
