"""
Resource URLs (path <-> structured identifier).

The Campus Navigator website addresses everything it can display with a path:

    /@13.732,51.0284,15.z                       a point on the map
    /karten/dresden/geb/apb                     a map region around a building
    /routing/APB/WEB/foot,shortest/@...         a route between two buildings
    /gebaeude/apb                               a building
    /barrierefrei/apb                           a building's accessibility page
    /hoersaele/apb                              a building's lecture halls
    /etplan/apb/00                              a floor
    /etplan/biz/02/raum/062102.0020             a room highlighted on its floor
    /raum/apb/00/542100.2310                    a room

Search results link to resources with a second, keyword-free grammar:

    dresden/geb/apb                             (3 segments) map region
    apb/00/raum/542100.2230                     (4 segments) room

The two grammars overlap, so the caller always says which one applies.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union
from urllib.parse import quote, unquote, urlsplit

from campusnav.config import Config, DEFAULT_ROUTE_VIEWPORT
from campusnav.errors import InvalidResourcePath
from campusnav.model import RouteMode


class Grammar(Enum):
    STRICT = "strict"
    LENIENT = "lenient"


# ---------------------------------------------------------------------------
# Resource variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CoordinateResource:
    lat: float
    lon: float
    zoom: int

    @property
    def building_id(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class MapResource:
    region: str
    building: str

    @property
    def building_id(self) -> Optional[str]:
        return self.building


@dataclass(frozen=True)
class RouteResource:
    origin: str
    destination: str
    mode: RouteMode = RouteMode.FOOT

    @property
    def building_id(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class BuildingResource:
    building: str

    @property
    def building_id(self) -> Optional[str]:
        return self.building


@dataclass(frozen=True)
class BuildingAccessibilityResource:
    building: str

    @property
    def building_id(self) -> Optional[str]:
        return self.building


@dataclass(frozen=True)
class LectureHallsResource:
    building: str

    @property
    def building_id(self) -> Optional[str]:
        return self.building


@dataclass(frozen=True)
class FloorResource:
    building: str
    floor: str

    @property
    def building_id(self) -> Optional[str]:
        return self.building


@dataclass(frozen=True)
class RoomOnFloorResource:
    building: str
    floor: str
    room: str

    @property
    def building_id(self) -> Optional[str]:
        return self.building


@dataclass(frozen=True)
class RoomResource:
    building: str
    floor: str
    room: str

    @property
    def building_id(self) -> Optional[str]:
        return self.building


Resource = Union[
    CoordinateResource,
    MapResource,
    RouteResource,
    BuildingResource,
    BuildingAccessibilityResource,
    LectureHallsResource,
    FloorResource,
    RoomOnFloorResource,
    RoomResource,
]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _segments(url_or_path: str) -> List[str]:
    """
    Non-empty, percent-decoded path segments. Scheme, host, query and fragment are ignored.
    """
    path = urlsplit(url_or_path).path
    return [unquote(s) for s in path.split("/") if s]


def _parse_coordinate(segment: str, original: str) -> CoordinateResource:
    parts = segment.split(",")
    if len(parts) != 3:
        raise InvalidResourcePath(original)

    # float()/int() would accept "1_0" and padding, which render back differently
    if any(c == "_" or c.isspace() for part in parts for c in part):
        raise InvalidResourcePath(original)

    raw_lat = parts[0].replace("@", "")
    raw_lon = parts[1]
    raw_zoom = parts[2]
    if raw_zoom.endswith(".z"):
        raw_zoom = raw_zoom[:-2]
    elif raw_zoom.endswith("z"):
        raw_zoom = raw_zoom[:-1]

    try:
        lat = float(raw_lat)
        lon = float(raw_lon)
        zoom = int(raw_zoom)
    except ValueError:
        raise InvalidResourcePath(original) from None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidResourcePath(original)
    return CoordinateResource(lat=lat, lon=lon, zoom=zoom)


def _parse_strict(segments: List[str], original: str) -> Resource:
    if not segments:
        raise InvalidResourcePath(original)

    if "@" in segments[0]:
        return _parse_coordinate(segments[0], original)

    keyword, rest = segments[0], segments[1:]

    if keyword == "karten" and len(rest) == 3:
        # karten/<region>/geb/<building>
        return MapResource(region=rest[0], building=rest[2])
    if keyword == "routing" and len(rest) == 4:
        # routing/<origin>/<destination>/<mode>,<variant>/<viewport>
        mode = RouteMode.from_string(rest[2].split(",")[0])
        return RouteResource(origin=rest[0], destination=rest[1], mode=mode)
    if keyword == "gebaeude" and len(rest) == 1:
        return BuildingResource(building=rest[0])
    if keyword == "barrierefrei" and len(rest) == 1:
        return BuildingAccessibilityResource(building=rest[0])
    if keyword == "hoersaele" and len(rest) == 1:
        return LectureHallsResource(building=rest[0])
    if keyword == "etplan":
        if len(rest) == 2:
            return FloorResource(building=rest[0], floor=rest[1])
        if len(rest) == 4 and rest[2] == "raum":
            return RoomOnFloorResource(building=rest[0], floor=rest[1], room=rest[3])
    if keyword == "raum" and len(rest) == 3:
        return RoomResource(building=rest[0], floor=rest[1], room=rest[2])

    raise InvalidResourcePath(original)


def _parse_lenient(segments: List[str], original: str) -> Resource:
    if len(segments) == 3:
        # <region>/geb/<building>
        return MapResource(region=segments[0], building=segments[2])
    if len(segments) == 4:
        # <building>/<floor>/raum/<room>
        return RoomResource(building=segments[0], floor=segments[1], room=segments[3])
    raise InvalidResourcePath(original)


def parse_resource(url_or_path: str, grammar: Grammar = Grammar.STRICT) -> Resource:
    """
    Parse a site URL (STRICT) or a search result link fragment (LENIENT).

    Raises InvalidResourcePath carrying the original string on any mismatch.
    Never apply LENIENT to site URLs, it cannot tell the shapes apart.
    """
    segments = _segments(url_or_path)
    if grammar is Grammar.LENIENT:
        return _parse_lenient(segments, url_or_path)
    return _parse_strict(segments, url_or_path)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _esc(segment: str) -> str:
    return quote(segment, safe="")


def render_path(resource: Resource, route_viewport: str = DEFAULT_ROUTE_VIEWPORT) -> str:
    """
    Canonical site path for a resource, the inverse of strict parsing.
    """
    if isinstance(resource, CoordinateResource):
        return f"/@{resource.lat!r},{resource.lon!r},{resource.zoom}.z"
    if isinstance(resource, MapResource):
        return f"/karten/{_esc(resource.region)}/geb/{_esc(resource.building)}"
    if isinstance(resource, RouteResource):
        return (
            f"/routing/{_esc(resource.origin)}/{_esc(resource.destination)}"
            f"/{resource.mode.value},shortest/{route_viewport}"
        )
    if isinstance(resource, BuildingResource):
        return f"/gebaeude/{_esc(resource.building)}"
    if isinstance(resource, BuildingAccessibilityResource):
        return f"/barrierefrei/{_esc(resource.building)}"
    if isinstance(resource, LectureHallsResource):
        return f"/hoersaele/{_esc(resource.building)}"
    if isinstance(resource, FloorResource):
        return f"/etplan/{_esc(resource.building)}/{_esc(resource.floor)}"
    if isinstance(resource, RoomOnFloorResource):
        return f"/etplan/{_esc(resource.building)}/{_esc(resource.floor)}/raum/{_esc(resource.room)}"
    if isinstance(resource, RoomResource):
        return f"/raum/{_esc(resource.building)}/{_esc(resource.floor)}/{_esc(resource.room)}"
    raise TypeError(f"Not a resource: {resource!r}")


class ResourceCodec:
    """
    Parse and render resources against one configured site.
    """

    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config or Config()

    def parse(self, url_or_path: str, grammar: Grammar = Grammar.STRICT) -> Resource:
        """
        Like parse_resource, but site URLs below a base URL with a sub path
        (e.g. https://host/sub/gebaeude/apb) are read relative to that base.
        """
        if grammar is Grammar.STRICT:
            base_path = urlsplit(self.config.base_url).path
            path = urlsplit(url_or_path).path
            if base_path != "/" and path.startswith(base_path):
                try:
                    return parse_resource("/" + path[len(base_path):], grammar)
                except InvalidResourcePath:
                    raise InvalidResourcePath(url_or_path) from None
        return parse_resource(url_or_path, grammar)

    def render(self, resource: Resource) -> str:
        return render_path(resource, route_viewport=self.config.route_viewport)

    def url(self, resource: Resource) -> str:
        """Absolute, user-facing URL of a resource."""
        return self.config.absolute(self.render(resource))
