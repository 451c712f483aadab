"""Client configuration."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass

from joern.protocol import (
    DEFAULT_BASE_URL,
    DEFAULT_BUFFER_SIZE,
    DEFAULT_TIMEOUT,
    HTTP_SCHEME,
    WS_SCHEME,
)


@dataclass(frozen=True)
class ClientConfig:
    """Immutable settings for a :class:`~joern.client.client.JoernClient`.

    Every field is optional:

    - ``base_url``: ``host:port`` of the Joern server, without scheme.
    - ``username`` / ``password``: HTTP Basic credentials. Only sent when both
      are non-blank after stripping whitespace.
    - ``buffer_size``: maximum number of bytes handed out per stream read.
    - ``timeout``: per-request timeout in seconds.
    """

    base_url: str = DEFAULT_BASE_URL
    username: str = ""
    password: str = ""
    buffer_size: int = DEFAULT_BUFFER_SIZE
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if self.buffer_size <= 0:
            raise ValueError(f"buffer_size must be positive, got {self.buffer_size}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @property
    def has_credentials(self) -> bool:
        return bool(self.username.strip()) and bool(self.password.strip())

    @property
    def http_url(self) -> str:
        return f"{HTTP_SCHEME}://{self.base_url}"

    @property
    def ws_url(self) -> str:
        return f"{WS_SCHEME}://{self.base_url}"

    def replace(self, **changes) -> ClientConfig:
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_env(cls, prefix: str = "JOERN_") -> ClientConfig:
        """Build a config from ``JOERN_*`` environment variables."""
        env = os.environ
        return cls(
            base_url=env.get(f"{prefix}BASE_URL", DEFAULT_BASE_URL),
            username=env.get(f"{prefix}USER", ""),
            password=env.get(f"{prefix}PASSWORD", ""),
            buffer_size=int(env.get(f"{prefix}BUFFER_SIZE", DEFAULT_BUFFER_SIZE)),
            timeout=float(env.get(f"{prefix}TIMEOUT", DEFAULT_TIMEOUT)),
        )
