"""Data models for registered sellers."""

from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlsplit

from ..infrastructure.transport import build_url

DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass
class Seller:
    """
    A seller endpoint registered with the marketplace.

    ``cash`` and ``online`` are only changed by reconciliation outcomes.
    """

    name: str
    hostname: str
    port: Optional[int] = None
    path: str = ""  # Prefix for /order and /feedback, no trailing slash
    scheme: str = "http"
    cash: float = 0.0
    online: bool = False

    @classmethod
    def from_url(cls, url: str, name: str) -> "Seller":
        """
        Build a seller from its base URL.

        Raises:
            ValueError: If the URL has no http(s) scheme or no host
        """
        parts = urlsplit(url.strip())
        if parts.scheme not in DEFAULT_PORTS:
            raise ValueError(f"Seller URL must be http or https: {url!r}")
        if not parts.hostname:
            raise ValueError(f"Seller URL has no host: {url!r}")

        return cls(
            name=name,
            hostname=parts.hostname,
            port=parts.port,
            path=parts.path.rstrip("/"),
            scheme=parts.scheme,
        )

    @property
    def url(self) -> str:
        """Base URL the seller registered with."""
        return build_url(self.hostname, self.port, self.path or "/", self.scheme)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "hostname": self.hostname,
            "port": self.port,
            "path": self.path,
            "scheme": self.scheme,
            "cash": self.cash,
            "online": self.online,
        }
