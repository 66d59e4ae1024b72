"""
Map and floorplan tile URLs.

The floorplan tile server has no index of which tiles exist for a floor, so
``find_floorplan_tiles`` asks for every tile of the zoom level's grid with a
HEAD request and keeps the ones that answer 200. The checks run on a fixed
size thread pool and the result is returned as one batch.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import IntEnum
from typing import List, Optional, Tuple
from urllib.parse import quote

import requests

from campusnav.config import Config
from campusnav.errors import ResponseUnreadable
from campusnav.model import format_floor_level

logger = logging.getLogger(__name__)


class ZoomLevel(IntEnum):
    """Floorplan zoom levels; the value is the number of tiles per side."""

    ONE = 1
    TWO = 2
    FOUR = 4
    EIGHT = 8


def map_tile_url(x: int, y: int, z: int, config: Optional[Config] = None) -> str:
    config = config or Config()
    return config.absolute(f"tileserver/{z}/{x}/{y}.png/nobase64")


def floorplan_tile_url(
    building: str,
    floor: int,
    x: int,
    y: int,
    zoom: ZoomLevel,
    config: Optional[Config] = None,
) -> str:
    """
    e.g. ("apb", 0, 0, 0, ZoomLevel.TWO) -> .../images/etplan_cache/APB00_2/0_0.png/nobase64
    """
    config = config or Config()
    building_id = quote(building.upper(), safe="")
    level = format_floor_level(floor)
    return config.absolute(f"images/etplan_cache/{building_id}{level}_{int(zoom)}/{x}_{y}.png/nobase64")


def _tile_exists(session: requests.Session, url: str, timeout: float) -> bool:
    try:
        resp = session.head(url, timeout=timeout, allow_redirects=True)
    except requests.RequestException as exc:
        raise ResponseUnreadable(str(exc)) from exc
    logger.debug("HEAD %s -> %s", url, resp.status_code)
    return resp.status_code == 200


def find_floorplan_tiles(
    building: str,
    floor: int,
    zoom: ZoomLevel,
    config: Optional[Config] = None,
    session: Optional[requests.Session] = None,
) -> List[str]:
    """
    Return the URLs of all existing floorplan tiles for one zoom level.

    Tiles come back in row order (y, then x). A network error on any check
    raises ResponseUnreadable. A session created here is closed afterwards,
    an injected one is left open.
    """
    config = config or Config()
    owns_session = session is None
    if session is None:
        session = requests.Session()

    candidates: List[Tuple[int, int, str]] = [
        (y, x, floorplan_tile_url(building, floor, x, y, zoom, config))
        for y in range(int(zoom))
        for x in range(int(zoom))
    ]

    found: List[Tuple[int, int, str]] = []
    try:
        with ThreadPoolExecutor(max_workers=config.tile_workers) as executor:
            future_to_tile = {
                executor.submit(_tile_exists, session, url, config.timeout): (y, x, url)
                for y, x, url in candidates
            }
            for future in as_completed(future_to_tile):
                if future.result():
                    found.append(future_to_tile[future])
    finally:
        if owns_session:
            session.close()

    found.sort()
    return [url for _, _, url in found]
