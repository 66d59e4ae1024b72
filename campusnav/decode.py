"""
Decoding (JSON payload -> model values).

One ``decode_*`` function per endpoint. Each takes the payload produced by
``normalize.load_payload`` and returns model values from ``campusnav.model``.

Important rules:
- structural problems raise DecodeFailed, nothing is silently skipped
- soft fallbacks exist only where the service is known to be sloppy:
  ternary flags, the optional accessibility badge and doorplate of a room,
  and a handful of per-field defaults
"""

from __future__ import annotations

import functools
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar, Union

from bs4 import BeautifulSoup

from campusnav.errors import DecodeFailed, InvalidResourcePath
from campusnav.model import (
    AccessibilityBadge,
    AccessibilityCategory,
    BuildingAccessibility,
    BuildingComplex,
    BuildingStructure,
    CanteenMenu,
    Course,
    DataHash,
    Day,
    Departure,
    Doorplate,
    Entrance,
    Floor,
    FloorRoom,
    Indication,
    Instruction,
    Login,
    Meal,
    Person,
    PublicTransport,
    RoomAccessibility,
    RoomID,
    RoomInfo,
    RoomType,
    Route,
    Search,
    SearchResult,
    Ternary,
    Timetable,
    TransportMode,
    Weekday,
)
from campusnav.resource import Grammar, parse_resource

logger = logging.getLogger(__name__)

T = TypeVar("T")

# trailing inline markup in search titles, e.g. "APB E023 <span class='sml'>(APB/E023/U)</span>"
_TITLE_MARKUP = re.compile(r" <.*>")


def decoder(fn: Callable[..., T]) -> Callable[..., T]:
    """
    Turn stray lookup/type errors inside a decoder into DecodeFailed.
    """

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return fn(*args, **kwargs)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise DecodeFailed(exc) from exc

    return wrapper


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _type_ok(value: Any, kind: Union[Type, Tuple[Type, ...]]) -> bool:
    # bool is an int subclass, JSON true must not pass as a number
    if isinstance(value, bool) and kind is not bool:
        return False
    if kind is float:
        return isinstance(value, (int, float))
    if kind is int and isinstance(value, float):
        return value.is_integer()
    return isinstance(value, kind)


def _obj(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeFailed(f"expected an object for {what}, got {type(value).__name__}")
    return value


def _list(value: Any, what: str) -> List[Any]:
    if not isinstance(value, list):
        raise DecodeFailed(f"expected an array for {what}, got {type(value).__name__}")
    return value


def _req(obj: Dict[str, Any], key: str, kind: Type[T]) -> T:
    if key not in obj or obj[key] is None:
        raise DecodeFailed(f"missing key {key!r}")
    value = obj[key]
    if not _type_ok(value, kind):
        raise DecodeFailed(f"key {key!r}: expected {kind.__name__}, got {type(value).__name__}")
    if kind is float:
        return float(value)  # type: ignore[return-value]
    if kind is int:
        return int(value)  # type: ignore[return-value]
    return value


def _opt(obj: Dict[str, Any], key: str, kind: Type[T]) -> Optional[T]:
    if obj.get(key) is None:
        return None
    return _req(obj, key, kind)


def _str_list(obj: Dict[str, Any], key: str) -> List[str]:
    values = _list(_req(obj, key, list), key)
    for v in values:
        if not isinstance(v, str):
            raise DecodeFailed(f"key {key!r}: expected strings, got {type(v).__name__}")
    return values


def _num_list(obj: Dict[str, Any], key: str, kind: Type[T]) -> List[T]:
    values = _list(_req(obj, key, list), key)
    out: List[T] = []
    for v in values:
        if not _type_ok(v, kind):
            raise DecodeFailed(f"key {key!r}: expected {kind.__name__} values, got {type(v).__name__}")
        out.append(kind(v))  # type: ignore[call-arg]
    return out


def _ternary(obj: Dict[str, Any], key: str) -> Ternary:
    """Never fails: anything that isn't "true"/"false" is no data."""
    value = obj.get(key)
    if isinstance(value, bool):
        return Ternary.from_bool(value)
    if isinstance(value, str):
        return Ternary.from_string(value)
    return Ternary.NODATA


def _optional(fn: Callable[[Any], T], value: Any) -> Optional[T]:
    """
    Decode a sub-object the service likes to omit or send half-filled.

    Only DecodeFailed is swallowed, and only for the sub-object passed in.
    """
    if value is None:
        return None
    try:
        return fn(value)
    except DecodeFailed as exc:
        logger.debug("Ignoring undecodable optional object: %s", exc)
        return None


def _xy_points(raw: Any, what: str) -> List[Tuple[float, float]]:
    points: List[Tuple[float, float]] = []
    for p in _list(raw, what):
        p = _obj(p, what)
        points.append((_req(p, "x", float), _req(p, "y", float)))
    return points


# ---------------------------------------------------------------------------
# Buildings
# ---------------------------------------------------------------------------


def _decode_structure(raw: Any) -> BuildingStructure:
    obj = _obj(raw, "building structure")
    return BuildingStructure(
        name=_req(obj, "name", str),
        construction_year=_req(obj, "bauj", str),
        is_landmarked=_req(obj, "denkm", bool),
        id=_req(obj, "gebnr", str),
        address=_req(obj, "str", str),
        zipcode=_req(obj, "plz", str),
        city=_req(obj, "ort", str),
    )


def _decode_entrance(raw: Any) -> Entrance:
    obj = _obj(raw, "entrance")
    lat = _opt(obj, "lat", float)
    lon = _opt(obj, "lon", float)
    return Entrance(
        id=_req(obj, "adrdoor", int),
        image=_opt(obj, "bildURL", str),
        note=_opt(obj, "bemerkung", str),
        is_accessible=_opt(obj, "barrierefrei", bool),
        has_steps=_opt(obj, "treppe", bool),
        has_open_button=_opt(obj, "taster", bool),
        is_at_ground_level=_opt(obj, "ebenerdig", bool),
        has_threshold_small=_opt(obj, "absatz_klein", bool),
        has_bell=_opt(obj, "allgem_klingel", bool),
        has_accessibility_bell=_opt(obj, "beh_klingel", bool),
        has_steps_big=_opt(obj, "stufen_gross", bool),
        has_ramp=_opt(obj, "rampe", bool),
        location=(lat, lon) if lat is not None and lon is not None else None,
    )


def _decode_building(raw: Any) -> BuildingComplex:
    obj = _obj(raw, "building complex")

    # an empty overview arrives as [] instead of {}
    raw_overview = obj.get("barfrei_info")
    overview = None
    if isinstance(raw_overview, dict):
        overview = {str(k): str(v) for k, v in raw_overview.items()}

    images = _opt(obj, "bilder", list) or []

    # x is the longitude, y the latitude
    outlines = [
        [(y, x) for x, y in _xy_points(outline, "punkte")]
        for outline in _list(_req(obj, "punkte", list), "punkte")
    ]

    return BuildingComplex(
        abbreviation=_req(obj, "krz", str),
        name=_req(obj, "name", str),
        raw_default_floor=_opt(obj, "stdetage", str),
        accessibility_overview=overview,
        entrances=[_decode_entrance(e) for e in _list(_req(obj, "eingänge", list), "eingänge")],
        images=[str(i) for i in images],
        structures=[_decode_structure(s) for s in _list(_req(obj, "teilgeb", list), "teilgeb")],
        points=outlines,
    )


@decoder
def decode_buildings(payload: Any) -> List[BuildingComplex]:
    return [_decode_building(b) for b in _list(payload, "buildings")]


@decoder
def decode_data_hash(payload: Any) -> DataHash:
    obj = _obj(payload, "hash")
    return DataHash(hash=_req(obj, "hash", str), encryption=_req(obj, "encryption", bool))


@decoder
def decode_building_accessibility(payload: Any) -> BuildingAccessibility:
    obj = _obj(payload, "building info")
    acc = _obj(_req(obj, "accessibility", dict), "accessibility")

    def int_list(key: str) -> List[int]:
        # missing or malformed lists are treated as empty, as the service does
        try:
            return _num_list(acc, key, int)
        except DecodeFailed:
            return []

    return BuildingAccessibility(
        has_accessible_entrance=_ternary(acc, "disabledentrancepresent"),
        has_elevator=_ternary(acc, "elevator"),
        accessible_entrances=int_list("disabledentrances"),
        has_accessible_restrooms=_ternary(acc, "disabledwc"),
        elevator_door_widths=int_list("elevatordoorwidth"),
    )


# ---------------------------------------------------------------------------
# Floors
# ---------------------------------------------------------------------------


def _decode_room_fields(raw: Any) -> Dict[str, Any]:
    """
    First pass: everything of a floor room except its type, which is only
    known from the group the room is listed under.
    """
    obj = _obj(raw, "room")
    raw_id = _req(obj, "id", str)
    try:
        identifier = RoomID.parse(raw_id)
    except ValueError as exc:
        raise DecodeFailed(exc) from exc

    name_x = _opt(obj, "namex", float)
    name_y = _opt(obj, "namey", float)

    return {
        "identifier": identifier,
        "name": _opt(obj, "name", str),
        "name_location": (name_x, name_y) if name_x is not None and name_y is not None else None,
        "points": _xy_points(_req(obj, "punkte", list), "punkte"),
        "is_lecture_hall": bool(_opt(obj, "list", bool)),
    }


def _decode_floor(raw: Any) -> Floor:
    obj = _obj(raw, "floor")

    # pass 1: (type, room fields) per group
    groups: List[Tuple[int, List[Dict[str, Any]]]] = []
    for group in _list(_req(obj, "typen", list), "typen"):
        group = _obj(group, "room type group")
        type_value = _req(group, "typ", int)
        rooms = [_decode_room_fields(r) for r in _list(_req(group, "räume", list), "räume")]
        groups.append((type_value, rooms))

    # pass 2: stamp the group's type onto each room
    rooms = [
        FloorRoom(type=RoomType.from_value(type_value), **fields)
        for type_value, members in groups
        for fields in members
    ]

    return Floor(
        raw_level=_req(obj, "etage", str),
        max_x=_req(obj, "maxX", float),
        max_y=_req(obj, "maxY", float),
        rooms=rooms,
    )


@decoder
def decode_floors(payload: Any) -> List[Floor]:
    return [_decode_floor(f) for f in _list(payload, "floors")]


# ---------------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------------


@decoder
def decode_accessibility_badge(payload: Any) -> AccessibilityBadge:
    obj = _obj(payload, "accessibility badge")
    return AccessibilityBadge(
        door_is_accessible=_ternary(obj, "door"),
        door_width=_req(obj, "doorwidth", int),
        steps_are_marked=_ternary(obj, "markedsteps"),
        hearing_loop_microport=_ternary(obj, "hearingloop_microport"),
        hearing_loop_inductive=_ternary(obj, "hearingloop_inductive"),
        wheelchair_spaces_available=_ternary(obj, "wheelchairspace_present"),
        wheelchair_spaces_count=_req(obj, "wheelchairspaces", int),
        lecturer_zone_is_accessible=_ternary(obj, "lecturer"),
    )


@decoder
def decode_doorplate(payload: Any) -> Doorplate:
    obj = _obj(payload, "doorplate")

    names = _str_list(obj, "names")
    functions = _str_list(obj, "functions")
    if len(names) != len(functions):
        logger.warning(
            "Doorplate lists %d names but %d functions, pairing up the first %d",
            len(names),
            len(functions),
            min(len(names), len(functions)),
        )
    people = [Person(name=n, function=f) for n, f in zip(names, functions) if n and f]

    return Doorplate(
        people=people,
        chair=_req(obj, "chair", str),
        # the text arrives with escaped newlines
        text=_req(obj, "textarea", str).replace("\\n", "\n"),
        department=_req(obj, "department", str),
        faculty=_req(obj, "faculty", str),
    )


@decoder
def decode_room_info(payload: Any) -> RoomInfo:
    obj = _obj(payload, "room info")
    return RoomInfo(
        name=_req(obj, "name", str),
        type=RoomType.from_value(_req(obj, "type", int)),
        is_routable=_req(obj, "routing", bool),
        accessibility_badge=_optional(decode_accessibility_badge, obj.get("accessibility")),
        doorplate=_optional(decode_doorplate, obj.get("doorplate")),
    )


@decoder
def decode_room_accessibility(payload: Any) -> RoomAccessibility:
    obj = _obj(payload, "room accessibility")

    flat: Dict[str, str] = {}
    for key, value in obj.items():
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise DecodeFailed(f"key {key!r}: expected string or int, got {type(value).__name__}")
        flat[key] = str(value)

    grouped: Dict[str, List[Tuple[str, str]]] = {}
    for key in sorted(flat):
        title, _, rest = key.partition("_")
        topic = rest.replace("_", " ").title() if rest else title.title()
        grouped.setdefault(title, []).append((topic, flat[key].title()))

    categories = [AccessibilityCategory(title=t.title(), entries=e) for t, e in sorted(grouped.items())]
    return RoomAccessibility(categories=categories)


# ---------------------------------------------------------------------------
# Timetables
# ---------------------------------------------------------------------------


def _decode_course(raw: Any) -> Course:
    obj = _obj(raw, "course")
    return Course(
        timeslot=_req(obj, "ds", int),
        name=_req(obj, "fach", str),
        lecturer=_opt(obj, "doz", str),
        field=_opt(obj, "bereich", str),
        lsk_field=_opt(obj, "lskbereich", str),
        lsk_course_language=_opt(obj, "lskkurslang", str),
        lsk_course_url=_opt(obj, "lskkursurl", str),
    )


def _decode_day(raw: Any) -> Day:
    obj = _obj(raw, "day")
    day_value = _req(obj, "tag", int)
    try:
        day = Weekday(day_value)
    except ValueError:
        raise DecodeFailed(f"unknown weekday {day_value!r}") from None
    return Day(day=day, courses=[_decode_course(c) for c in _list(_req(obj, "stunden", list), "stunden")])


@decoder
def decode_timetable(payload: Any) -> Timetable:
    obj = _obj(payload, "timetable")
    return Timetable(
        week1_name=_req(obj, "woche1name", str),
        week1=[_decode_day(d) for d in _list(_req(obj, "woche1", list), "woche1")],
        week2_name=_req(obj, "woche2name", str),
        week2=[_decode_day(d) for d in _list(_req(obj, "woche2", list), "woche2")],
    )


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


@decoder
def decode_route(payload: Any) -> Route:
    obj = _obj(payload, "route")

    raw_coords = _num_list(obj, "coords", float)
    if len(raw_coords) % 2 != 0:
        raise DecodeFailed(f"odd number of coords received ({len(raw_coords)}), has to be even")
    coords = list(zip(raw_coords[0::2], raw_coords[1::2]))

    instr = _obj(_req(obj, "instructions", dict), "instructions")
    distances = _num_list(instr, "distances", float)
    indications = _num_list(instr, "indications", int)
    durations = _num_list(instr, "mins", int)
    descriptions = _str_list(instr, "descriptions")

    lengths = {len(distances), len(indications), len(durations), len(descriptions)}
    if len(lengths) != 1:
        raise DecodeFailed(
            "instruction arrays differ in length: "
            f"distances={len(distances)} indications={len(indications)} "
            f"mins={len(durations)} descriptions={len(descriptions)}"
        )

    instructions: List[Instruction] = []
    for distance, raw_indication, duration, description in zip(distances, indications, durations, descriptions):
        try:
            indication = Indication(raw_indication)
        except ValueError:
            raise DecodeFailed(f"unknown route indication {raw_indication!r}") from None
        instructions.append(
            Instruction(distance=distance, indication=indication, duration=duration, description=description)
        )

    return Route(
        length=_req(obj, "route_length", float),
        duration=_req(obj, "route_time", float),
        coords=coords,
        instructions=instructions,
    )


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def clean_search_title(raw: str) -> str:
    """
    Drop trailing inline markup and resolve HTML entities.

    "APB E023 <span class='sml'>(APB/E023/U)</span>" -> "APB E023"
    """
    title = _TITLE_MARKUP.sub("", raw)
    if "&" in title or "<" in title:
        title = BeautifulSoup(title, "html.parser").get_text()
    return title.strip()


def _decode_search_result(raw: Any) -> SearchResult:
    pair = _list(raw, "search result")
    if len(pair) < 2 or not isinstance(pair[0], str) or not isinstance(pair[1], str):
        raise DecodeFailed(f"expected [title, link] for a search result, got {pair!r}")
    try:
        resource = parse_resource(pair[1], Grammar.LENIENT)
    except InvalidResourcePath as exc:
        raise DecodeFailed(exc) from exc
    return SearchResult(title=clean_search_title(pair[0]), resource=resource)


@decoder
def decode_search(payload: Any) -> Search:
    obj = _obj(payload, "search")
    return Search(
        autocomplete=_req(obj, "assist", str),
        building_results=[_decode_search_result(r) for r in _list(_req(obj, "results_geb", list), "results_geb")],
        room_results=[_decode_search_result(r) for r in _list(_req(obj, "results_raum", list), "results_raum")],
    )


# ---------------------------------------------------------------------------
# Canteens, public transport, login
# ---------------------------------------------------------------------------


def _decode_meal(raw: Any) -> Meal:
    pair = _list(raw, "meal")
    if len(pair) != 2 or not all(isinstance(v, str) for v in pair):
        raise DecodeFailed(f"expected [description, prices] for a meal, got {pair!r}")
    description, prices = pair
    return Meal(description=description, prices=prices or None)


@decoder
def decode_canteen_menu(payload: Any) -> CanteenMenu:
    obj = _obj(payload, "canteen menu")
    return CanteenMenu(
        name=_req(obj, "name", str),
        meals=[_decode_meal(m) for m in _list(_req(obj, "diet", list), "diet")],
    )


def _decode_departure(raw: Any) -> Departure:
    values = _list(raw, "departure")
    if len(values) < 3:
        raise DecodeFailed(f"departure expects at least 3 values, got {len(values)}")
    line, direction, eta_raw = values[0], values[1], values[2]
    if not all(isinstance(v, str) for v in (line, direction, eta_raw)):
        raise DecodeFailed(f"departure values must be strings, got {values!r}")

    try:
        eta = int(eta_raw)
    except ValueError:
        # the service sends e.g. "" for departures happening right now
        eta = 0

    mode: Optional[TransportMode] = None
    if len(values) > 3 and values[3] not in (None, ""):
        try:
            mode = TransportMode(values[3])
        except ValueError:
            raise DecodeFailed(f"unknown transport mode {values[3]!r}") from None

    return Departure(line=line, direction=direction, eta=eta, mode=mode)


@decoder
def decode_public_transport(payload: Any) -> PublicTransport:
    values = _list(payload, "departures")
    if len(values) < 2 or not isinstance(values[0], str):
        raise DecodeFailed("expected [description, departures, ...]")
    return PublicTransport(
        description=values[0],
        departures=[_decode_departure(d) for d in _list(values[1], "departures")],
    )


@decoder
def decode_login(payload: Any) -> Login:
    return Login(token=_req(_obj(payload, "login"), "token", str))
