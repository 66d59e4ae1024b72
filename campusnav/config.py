"""
Client configuration.

A ``Config`` is created once per client and handed to everything that needs
the base URL (request builder, resource codec, tile helpers). There is no
module-level mutable configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urljoin


DEFAULT_BASE_URL = "https://navigator.tu-dresden.de/"

# Map view appended to rendered route links, the site requires a viewport segment there.
DEFAULT_ROUTE_VIEWPORT = "@13.7274,51.0287,15.z"


@dataclass(frozen=True)
class Config:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    tile_workers: int = 8
    route_viewport: str = DEFAULT_ROUTE_VIEWPORT
    user_agent: str = "campusnav"

    def __post_init__(self) -> None:
        # urljoin drops the last path segment of a base without trailing slash
        if not self.base_url.endswith("/"):
            object.__setattr__(self, "base_url", self.base_url + "/")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout!r}")
        if self.tile_workers < 1:
            raise ValueError(f"tile_workers must be at least 1, got {self.tile_workers!r}")

    def absolute(self, path: str) -> str:
        """
        Resolve a path relative to the base URL.

        Leading slashes are ignored so that a base with a sub path keeps it.
        """
        return urljoin(self.base_url, path.lstrip("/"))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Build a config from CAMPUSNAV_* environment variables, falling back to defaults.
        """
        env = os.environ if environ is None else environ
        kwargs = {}
        if env.get("CAMPUSNAV_BASE_URL"):
            kwargs["base_url"] = env["CAMPUSNAV_BASE_URL"].strip()
        if env.get("CAMPUSNAV_TIMEOUT"):
            kwargs["timeout"] = float(env["CAMPUSNAV_TIMEOUT"])
        if env.get("CAMPUSNAV_TILE_WORKERS"):
            kwargs["tile_workers"] = int(env["CAMPUSNAV_TILE_WORKERS"])
        return cls(**kwargs)
