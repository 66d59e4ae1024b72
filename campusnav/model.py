"""
Central data model definitions used across the project.

Everything the decoder produces is defined here as a frozen dataclass, so
that values are created once on decode and never change afterwards.
Field names are the English ones; the German wire keys live in decode.py.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from campusnav.config import Config

if TYPE_CHECKING:
    from campusnav.resource import BuildingResource, Resource


# (latitude, longitude)
LatLon = Tuple[float, float]


# ---------------------------------------------------------------------------
# Small value types
# ---------------------------------------------------------------------------


class Ternary(Enum):
    """
    Either true, false or no data.

    The service sends accessibility flags as free-form strings and does not
    tell "false" apart from "unknown", so plain booleans are not enough.
    """

    TRUE = "true"
    FALSE = "false"
    NODATA = "nodata"

    @classmethod
    def from_string(cls, value: str) -> "Ternary":
        lowered = value.lower()
        if lowered == "true":
            return cls.TRUE
        if lowered == "false":
            return cls.FALSE
        return cls.NODATA

    @classmethod
    def from_bool(cls, value: bool) -> "Ternary":
        return cls.TRUE if value else cls.FALSE

    def __bool__(self) -> bool:
        return self is Ternary.TRUE


def parse_floor_level(raw: str) -> Optional[int]:
    """
    Convert a 2-char floor level ("00", "-1", "--") to an int.

    "--" means the room is not on any floor and maps to None.
    Raises ValueError for anything else that is not numeric.
    """
    value = raw.strip()
    if value == "--":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid floor level: {raw!r}") from None


def format_floor_level(level: Optional[int]) -> str:
    """
    Inverse of parse_floor_level: 0 -> "00", 3 -> "03", -1 -> "-1", None -> "--".
    """
    if level is None:
        return "--"
    if 0 <= level <= 9:
        return f"0{level}"
    return str(level)


@dataclass(frozen=True)
class RoomID:
    """
    Room identifier, e.g. "351601.0420".

    The part before the dot is the 4-char building structure code followed
    by the 2-char floor level, the part after it is the room number.
    """

    building_structure: str
    raw_level: str
    room_id: str
    full_id: str

    @classmethod
    def parse(cls, value: str) -> "RoomID":
        parts = value.split(".")
        if len(parts) != 2:
            raise ValueError(f"Invalid room id: {value!r}")
        prefix, number = parts
        if len(prefix) != 6 or not number:
            raise ValueError(f"Invalid room id: {value!r}")
        raw_level = prefix[-2:]
        # raises for e.g. "xx"
        parse_floor_level(raw_level)
        return cls(building_structure=prefix[:4], raw_level=raw_level, room_id=number, full_id=value)

    @property
    def level(self) -> Optional[int]:
        return parse_floor_level(self.raw_level)

    def __str__(self) -> str:
        return self.full_id


class RoomType(IntEnum):
    STAIRWELL = 11
    ELEVATOR = 12
    RESTROOM = 13
    ACCESSIBLE_RESTROOM = 14
    BABY_CHANGING_ROOM = 15
    LIBRARY = 21
    LECTURE_HALL = 22
    SEMINAR_ROOM = 23
    DRAWING_ROOM = 24
    RESTING_ROOM = 26
    COAT_ROOM = 27
    ROOM = 29
    OTHER = -1

    @classmethod
    def from_value(cls, value: int) -> "RoomType":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER

    @property
    def color(self) -> int:
        """Display color as 0xRRGGBB."""
        return _ROOM_COLORS.get(self, 0xFFFFFF)

    @property
    def hex_color(self) -> str:
        return f"#{self.color:06x}"


_ROOM_COLORS: Dict[RoomType, int] = {
    RoomType.STAIRWELL: 0xD4BFB4,
    RoomType.ELEVATOR: 0xBD927B,
    RoomType.RESTROOM: 0xA3DBF0,
    RoomType.ACCESSIBLE_RESTROOM: 0xA3DBF0,
    RoomType.BABY_CHANGING_ROOM: 0xA3DBF0,
    RoomType.LECTURE_HALL: 0xFFA35C,
    RoomType.SEMINAR_ROOM: 0xECF7AA,
    RoomType.COAT_ROOM: 0xA09CBD,
    RoomType.ROOM: 0xF0F0F0,
}


class RouteMode(Enum):
    FOOT = "foot"
    BIKE = "bike"
    WHEELCHAIR = "wheelchair"
    CAR = "car"

    @classmethod
    def from_string(cls, value: str) -> "RouteMode":
        """Unknown modes fall back to FOOT, as the website does."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.FOOT


# ---------------------------------------------------------------------------
# Buildings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BuildingStructure:
    """
    One physical building within a building complex.
    """

    name: str
    construction_year: str
    is_landmarked: bool
    id: str
    address: str
    zipcode: str
    city: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Entrance:
    id: int
    image: Optional[str] = None
    note: Optional[str] = None
    is_accessible: Optional[bool] = None
    has_steps: Optional[bool] = None
    has_open_button: Optional[bool] = None
    is_at_ground_level: Optional[bool] = None
    has_threshold_small: Optional[bool] = None
    has_bell: Optional[bool] = None
    has_accessibility_bell: Optional[bool] = None
    has_steps_big: Optional[bool] = None
    has_ramp: Optional[bool] = None
    location: Optional[LatLon] = None

    def image_url(self, config: Config) -> Optional[str]:
        if not self.image:
            return None
        return config.absolute(self.image)

    def __str__(self) -> str:
        return f"Entrance #{self.id}"


@dataclass(frozen=True)
class BuildingComplex:
    """
    A building complex, possibly made up of more than one building structure.
    """

    abbreviation: str
    name: str
    raw_default_floor: Optional[str]
    accessibility_overview: Optional[Dict[str, str]]
    entrances: List[Entrance]
    images: List[str]
    structures: List[BuildingStructure]
    # one outline per structure, each a list of (lat, lon)
    points: List[List[LatLon]]

    @property
    def default_floor(self) -> Optional[int]:
        if self.raw_default_floor is None:
            return None
        return parse_floor_level(self.raw_default_floor)

    def image_urls(self, config: Config) -> List[str]:
        return [config.absolute(img) for img in self.images]

    @property
    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """(min_lat, min_lon, max_lat, max_lon) over all outlines, None without points."""
        flat = [p for outline in self.points for p in outline]
        if not flat:
            return None
        lats = [p[0] for p in flat]
        lons = [p[1] for p in flat]
        return min(lats), min(lons), max(lats), max(lons)

    @property
    def center(self) -> Optional[LatLon]:
        box = self.bounds
        if box is None:
            return None
        min_lat, min_lon, max_lat, max_lon = box
        return (min_lat + max_lat) / 2, (min_lon + max_lon) / 2

    def contains_room(self, room_id: RoomID) -> bool:
        return any(s.id == room_id.building_structure for s in self.structures)

    @property
    def resource(self) -> "BuildingResource":
        from campusnav.resource import BuildingResource

        return BuildingResource(building=self.abbreviation)

    def __str__(self) -> str:
        return f"{self.abbreviation}: {self.name}"


@dataclass(frozen=True)
class BuildingAccessibility:
    has_accessible_entrance: Ternary = Ternary.NODATA
    has_elevator: Ternary = Ternary.NODATA
    accessible_entrances: List[int] = field(default_factory=list)
    has_accessible_restrooms: Ternary = Ternary.NODATA
    elevator_door_widths: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class DataHash:
    hash: str
    encryption: bool


# ---------------------------------------------------------------------------
# Floors and rooms
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FloorRoom:
    identifier: RoomID
    name: Optional[str]
    name_location: Optional[Tuple[float, float]]
    points: List[Tuple[float, float]]
    is_lecture_hall: bool
    type: RoomType

    @property
    def color(self) -> int:
        return self.type.color


@dataclass(frozen=True)
class Floor:
    raw_level: str
    max_x: float
    max_y: float
    rooms: List[FloorRoom]

    @property
    def level(self) -> Optional[int]:
        return parse_floor_level(self.raw_level)


@dataclass(frozen=True)
class AccessibilityBadge:
    door_is_accessible: Ternary
    door_width: int
    steps_are_marked: Ternary
    hearing_loop_microport: Ternary
    hearing_loop_inductive: Ternary
    wheelchair_spaces_available: Ternary
    wheelchair_spaces_count: int
    lecturer_zone_is_accessible: Ternary


@dataclass(frozen=True)
class Person:
    name: str
    function: str


@dataclass(frozen=True)
class Doorplate:
    people: List[Person]
    chair: str
    text: str
    department: str
    faculty: str


@dataclass(frozen=True)
class RoomInfo:
    name: str
    type: RoomType
    is_routable: bool
    accessibility_badge: Optional[AccessibilityBadge] = None
    doorplate: Optional[Doorplate] = None


@dataclass(frozen=True)
class AccessibilityCategory:
    title: str
    entries: List[Tuple[str, str]]


@dataclass(frozen=True)
class RoomAccessibility:
    categories: List[AccessibilityCategory]

    def category(self, title: str) -> Optional[AccessibilityCategory]:
        for c in self.categories:
            if c.title.lower() == title.lower():
                return c
        return None


# ---------------------------------------------------------------------------
# Timetables
# ---------------------------------------------------------------------------

TIMESLOTS: Tuple[str, ...] = (
    "7:30 - 9:00",
    "9:20 - 10:50",
    "11:10 - 12:40",
    "13:00 - 14:30",
    "14:50 - 16:20",
    "16:40 - 18:10",
    "18:30 - 20:00",
    "20:20 - 21:50",
)


class Weekday(IntEnum):
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4


@dataclass(frozen=True)
class Course:
    """
    One occupied timeslot in a room's timetable.
    """

    timeslot: int
    name: str
    lecturer: Optional[str] = None
    field: Optional[str] = None
    lsk_field: Optional[str] = None
    lsk_course_language: Optional[str] = None
    lsk_course_url: Optional[str] = None

    @property
    def is_lsk(self) -> bool:
        return self.lsk_field is not None

    @property
    def time_label(self) -> Optional[str]:
        if 1 <= self.timeslot <= len(TIMESLOTS):
            return TIMESLOTS[self.timeslot - 1]
        return None


@dataclass(frozen=True)
class Day:
    day: Weekday
    courses: List[Course]


@dataclass(frozen=True)
class Timetable:
    week1_name: str
    week1: List[Day]
    week2_name: str
    week2: List[Day]


# ---------------------------------------------------------------------------
# Routing and search
# ---------------------------------------------------------------------------


class Indication(IntEnum):
    SHARP_LEFT = -3
    LEFT = -2
    LIGHT_LEFT = -1
    CONTINUE = 0
    LIGHT_RIGHT = 1
    RIGHT = 2
    SHARP_RIGHT = 3
    DESTINATION_REACHED = 4
    INTERMEDIATE = 5
    ROUNDABOUT = 6


@dataclass(frozen=True)
class Instruction:
    distance: float
    indication: Indication
    duration: int
    description: str


@dataclass(frozen=True)
class Route:
    # meters
    length: float
    # minutes
    duration: float
    coords: List[LatLon]
    instructions: List[Instruction]


@dataclass(frozen=True)
class SearchResult:
    title: str
    resource: "Resource"


@dataclass(frozen=True)
class Search:
    autocomplete: str
    building_results: List[SearchResult]
    room_results: List[SearchResult]


# ---------------------------------------------------------------------------
# Canteens, public transport, login
# ---------------------------------------------------------------------------

CANTEENS: Dict[str, str] = {
    "m13": "Alte Mensa",
    "nmen": "Zeltschlößchen",
    "mjoh": "Mensa Johannstadt",
    "mrei": "Mensa Reichenbachstraße",
    "pot": "BioMensa U-Boot",
    "web": "Mensa Blau",
    "bzw": "Mensa Siedepunkt",
    "ros": "Mensa TellerRandt",
    "gcub": "GrillCube",
}


@dataclass(frozen=True)
class Meal:
    description: str
    prices: Optional[str]


@dataclass(frozen=True)
class CanteenMenu:
    name: str
    meals: List[Meal]


class TransportMode(Enum):
    TRAM = "t"
    BUS = "b"


@dataclass(frozen=True)
class Departure:
    line: str
    direction: str
    # minutes until departure
    eta: int
    mode: Optional[TransportMode]


@dataclass(frozen=True)
class PublicTransport:
    description: str
    departures: List[Departure]


@dataclass(frozen=True)
class Login:
    token: str
