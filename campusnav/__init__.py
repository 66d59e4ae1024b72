"""
Client for the TU Dresden Campus Navigator web service.

Modules:

- ``client``: ``CampusNavigator``, one method per endpoint
- ``resource``: site URL <-> resource identifiers
- ``normalize`` / ``decode``: repairing and decoding responses
- ``endpoints``: request builders
- ``model``: decoded value types
- ``tiles``: map and floorplan tile URLs
"""

from campusnav.client import CampusNavigator, buildings_from_bytes
from campusnav.config import Config
from campusnav.errors import (
    CampusNavigatorError,
    DecodeFailed,
    InvalidQuery,
    InvalidResourcePath,
    ReEncodingFailed,
    ResponseUnreadable,
    ServerReportedError,
    ServerStatus,
)
from campusnav.resource import Grammar, ResourceCodec, parse_resource, render_path

__all__ = [
    "CampusNavigator",
    "CampusNavigatorError",
    "Config",
    "DecodeFailed",
    "Grammar",
    "InvalidQuery",
    "InvalidResourcePath",
    "ReEncodingFailed",
    "ResourceCodec",
    "ResponseUnreadable",
    "ServerReportedError",
    "ServerStatus",
    "buildings_from_bytes",
    "parse_resource",
    "render_path",
]
