"""
CLI (Command Line Interface).

Quick terminal access to the Campus Navigator API, e.g.:

    campusnav resource https://navigator.tu-dresden.de/etplan/biz/02/raum/062102.0020
    campusnav search E023
    campusnav buildings --if-changed
    campusnav floors APB
    campusnav room 542100.2230
    campusnav timetable 136101.0400
    campusnav route 51.0254 13.7232 51.0290 13.7262 --mode bike
    campusnav menu m13
    campusnav departures "Münchner Platz"
    campusnav tiles APB 0 --zoom 2

Note:
- This CLI is intentionally simple and prints plain text (no rich formatting)
- Errors are printed and turn into a nonzero exit code
"""

from __future__ import annotations

import argparse
import logging

from campusnav.client import CampusNavigator
from campusnav.config import Config
from campusnav.errors import CampusNavigatorError
from campusnav.model import CANTEENS, RouteMode, Ternary
from campusnav.storage import load_data_hash, save_data_hash
from campusnav.tiles import ZoomLevel, find_floorplan_tiles


def _ternary_text(value: Ternary) -> str:
    return {Ternary.TRUE: "yes", Ternary.FALSE: "no", Ternary.NODATA: "n/a"}[value]


def _cmd_resource(args: argparse.Namespace, nav: CampusNavigator) -> int:
    """
    Parse a site URL and print the resource and its canonical URL.
    """
    res = nav.resource(args.url)
    print(res)
    print(nav.resource_url(res))
    return 0


def _cmd_search(args: argparse.Namespace, nav: CampusNavigator) -> int:
    query = (args.text or "").strip()
    if not query:
        print("Please provide a search text.")
        return 1

    result = nav.search(query)
    if not result.building_results and not result.room_results:
        print("No results.")
        return 0

    for r in result.building_results:
        print(f"building | {r.title} | {nav.resource_url(r.resource)}")
    for r in result.room_results:
        print(f"room     | {r.title} | {nav.resource_url(r.resource)}")
    return 0


def _cmd_buildings(args: argparse.Namespace, nav: CampusNavigator) -> int:
    """
    List building complexes, optionally only when the data hash changed.
    """
    if args.if_changed:
        old_hash = load_data_hash(args.state) or ""
        changed = nav.buildings_if_changed(old_hash)
        if changed is None:
            print("Building data unchanged.")
            return 0
        new_hash, buildings = changed
        save_data_hash(new_hash.hash, args.state)
    else:
        buildings = nav.buildings()

    for b in sorted(buildings, key=lambda b: b.abbreviation):
        print(f"{b.abbreviation:<6} {b.name}")
    print(f"{len(buildings)} building complexes")
    return 0


def _cmd_floors(args: argparse.Namespace, nav: CampusNavigator) -> int:
    for floor in nav.floors(args.building):
        lecture_halls = sum(1 for r in floor.rooms if r.is_lecture_hall)
        print(f"{floor.raw_level:>3}  {len(floor.rooms)} rooms, {lecture_halls} lecture halls")
    return 0


def _cmd_room(args: argparse.Namespace, nav: CampusNavigator) -> int:
    info = nav.room_info(args.room_id)
    print(f"{info.name} ({info.type.name.lower().replace('_', ' ')})")
    print(f"Routable: {'yes' if info.is_routable else 'no'}")

    badge = info.accessibility_badge
    if badge is not None:
        print(f"Door accessible: {_ternary_text(badge.door_is_accessible)} ({badge.door_width} cm)")
        print(f"Wheelchair spaces: {badge.wheelchair_spaces_count}")

    plate = info.doorplate
    if plate is not None:
        for person in plate.people:
            print(f"- {person.name}, {person.function}")
        if plate.department:
            print(plate.department)
    return 0


def _cmd_timetable(args: argparse.Namespace, nav: CampusNavigator) -> int:
    tt = nav.timetable(args.room_id)
    for week_name, days in ((tt.week1_name, tt.week1), (tt.week2_name, tt.week2)):
        print(week_name)
        for day in days:
            for course in day.courses:
                slot = course.time_label or f"DS {course.timeslot}"
                print(f"  {day.day.name.title():<10} {slot:<14} {course.name}")
    return 0


def _cmd_route(args: argparse.Namespace, nav: CampusNavigator) -> int:
    mode = RouteMode.from_string(args.mode)
    route = nav.route((args.olat, args.olon), (args.dlat, args.dlon), mode)
    print(f"{route.length:.0f} m, {route.duration:.0f} min")
    for step in route.instructions:
        print(f"  {step.distance:>7.1f} m  {step.description}")
    return 0


def _cmd_menu(args: argparse.Namespace, nav: CampusNavigator) -> int:
    canteen = args.canteen.strip().lower()
    if canteen not in CANTEENS:
        print(f"Warning: unknown canteen '{canteen}', known: {', '.join(sorted(CANTEENS))}")

    menu = nav.canteen_menu(canteen)
    print(menu.name)
    for meal in menu.meals:
        price = f" | {meal.prices}" if meal.prices else ""
        print(f"- {meal.description}{price}")
    return 0


def _cmd_departures(args: argparse.Namespace, nav: CampusNavigator) -> int:
    transport = nav.departures(args.stop)
    print(transport.description)
    for dep in transport.departures:
        print(f"{dep.line:>4} {dep.direction:<30} {dep.eta:>3} min")
    return 0


def _cmd_tiles(args: argparse.Namespace, nav: CampusNavigator) -> int:
    try:
        zoom = ZoomLevel(args.zoom)
    except ValueError:
        print(f"Invalid zoom level: {args.zoom} (use 1, 2, 4 or 8)")
        return 1

    urls = find_floorplan_tiles(args.building, args.floor, zoom, config=nav.config, session=nav.session)
    for url in urls:
        print(url)
    print(f"{len(urls)} tiles")
    return 0


_COMMANDS = {
    "resource": _cmd_resource,
    "search": _cmd_search,
    "buildings": _cmd_buildings,
    "floors": _cmd_floors,
    "room": _cmd_room,
    "timetable": _cmd_timetable,
    "route": _cmd_route,
    "menu": _cmd_menu,
    "departures": _cmd_departures,
    "tiles": _cmd_tiles,
}


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="campusnav", description="Campus Navigator CLI")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    p_resource = sub.add_parser("resource", help="Parse a Campus Navigator URL")
    p_resource.add_argument("url", type=str, help="Site URL or path (e.g. /gebaeude/apb)")

    p_search = sub.add_parser("search", help="Search for buildings and rooms")
    p_search.add_argument("text", type=str, help="Search text")

    p_buildings = sub.add_parser("buildings", help="List all building complexes")
    p_buildings.add_argument("--if-changed", action="store_true", help="Only fetch if the data hash changed")
    p_buildings.add_argument("--state", type=str, default=None, help="State file for the last seen hash")

    p_floors = sub.add_parser("floors", help="List the floors of a building")
    p_floors.add_argument("building", type=str, help="Building abbreviation (e.g. APB)")

    p_room = sub.add_parser("room", help="Show room information")
    p_room.add_argument("room_id", type=str, help="Room ID (e.g. 542100.2230)")

    p_timetable = sub.add_parser("timetable", help="Show a room's timetable")
    p_timetable.add_argument("room_id", type=str, help="Room ID (e.g. 136101.0400)")

    p_route = sub.add_parser("route", help="Route between two coordinates")
    p_route.add_argument("olat", type=float)
    p_route.add_argument("olon", type=float)
    p_route.add_argument("dlat", type=float)
    p_route.add_argument("dlon", type=float)
    p_route.add_argument("--mode", type=str, default="foot", help="foot, bike, wheelchair or car")

    p_menu = sub.add_parser("menu", help="Show today's canteen menu")
    p_menu.add_argument("canteen", type=str, help="Canteen ID (e.g. m13)")

    p_departures = sub.add_parser("departures", help="Show public transport departures")
    p_departures.add_argument("stop", type=str, help="Stop name (e.g. 'Münchner Platz')")

    p_tiles = sub.add_parser("tiles", help="List existing floorplan tiles")
    p_tiles.add_argument("building", type=str)
    p_tiles.add_argument("floor", type=int)
    p_tiles.add_argument("--zoom", type=int, default=1, help="1, 2, 4 or 8")

    return parser


def main(argv: list[str] | None = None, navigator: CampusNavigator | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    handler = _COMMANDS.get(args.command)
    if handler is None:
        raise SystemExit(2)

    nav = navigator or CampusNavigator(Config.from_env())
    try:
        code = handler(args, nav)
    except CampusNavigatorError as exc:
        print(f"Error: {exc}")
        code = 1
    finally:
        if navigator is None:
            nav.close()

    raise SystemExit(code)
