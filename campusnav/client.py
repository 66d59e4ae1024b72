"""
HTTP client for the Campus Navigator API.

    navigator = CampusNavigator()
    buildings = navigator.buildings()
    floors = navigator.floors("APB")

Every method is one independent request/response exchange:
build the request -> send it -> repair the bytes -> decode the payload.
The client keeps no state between calls apart from its config and the
requests session, so calls may be issued from several threads at once.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Tuple, TypeVar

import requests

from campusnav import decode, endpoints
from campusnav.config import Config
from campusnav.endpoints import ApiRequest
from campusnav.errors import ResponseUnreadable, ServerStatus
from campusnav.model import (
    BuildingAccessibility,
    BuildingComplex,
    CanteenMenu,
    DataHash,
    Floor,
    Login,
    PublicTransport,
    RoomAccessibility,
    RoomInfo,
    Route,
    RouteMode,
    Search,
    Timetable,
)
from campusnav.normalize import Encoding, load_payload
from campusnav.resource import Grammar, Resource, ResourceCodec

logger = logging.getLogger(__name__)

T = TypeVar("T")

RawDataHandler = Callable[[bytes], None]


def buildings_from_bytes(raw: bytes, encoding: Encoding = Encoding.LATIN1) -> List[BuildingComplex]:
    """
    Decode a stored response of m/json_gebaeude/all.

    Use this to ship initial data with an application or to read back a
    response saved through a raw data handler.
    """
    return decode.decode_buildings(load_payload(raw, encoding))


class CampusNavigator:
    def __init__(self, config: Optional[Config] = None, session: Optional[requests.Session] = None) -> None:
        self.config = config or Config()
        # only a session created here is closed by close()
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.resources = ResourceCodec(self.config)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "CampusNavigator":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -----------------------------------------------------------------------
    # Core logic
    # -----------------------------------------------------------------------

    def _send(self, api_request: ApiRequest) -> bytes:
        """
        Execute a request and return the raw body of a 2xx response.
        """
        prepared = self.session.prepare_request(api_request.to_request(self.config))
        logger.debug("%s %s", prepared.method, prepared.url)

        try:
            resp = self.session.send(prepared, timeout=self.config.timeout)
        except requests.RequestException as exc:
            raise ResponseUnreadable(str(exc)) from exc

        if not 200 <= resp.status_code < 300:
            raise ServerStatus(resp.status_code, resp.reason or None)

        raw = resp.content
        if not raw:
            raise ResponseUnreadable("empty response body")
        return raw

    def _fetch(
        self,
        api_request: ApiRequest,
        decoder: Callable[[Any], T],
        raw_data_handler: Optional[RawDataHandler] = None,
    ) -> T:
        raw = self._send(api_request)
        if raw_data_handler is not None:
            raw_data_handler(raw)
        return decoder(load_payload(raw, api_request.encoding))

    # -----------------------------------------------------------------------
    # Buildings
    # -----------------------------------------------------------------------

    def buildings(self, raw_data_handler: Optional[RawDataHandler] = None) -> List[BuildingComplex]:
        """
        All building complexes. raw_data_handler receives the undecoded body,
        e.g. to store it for buildings_from_bytes.
        """
        return self._fetch(endpoints.all_buildings(), decode.decode_buildings, raw_data_handler)

    def data_hash(self) -> DataHash:
        return self._fetch(endpoints.data_hash(), decode.decode_data_hash)

    def buildings_if_changed(
        self,
        old_hash: str,
        raw_data_handler: Optional[RawDataHandler] = None,
    ) -> Optional[Tuple[DataHash, List[BuildingComplex]]]:
        """
        Fetch all building complexes only if the data hash differs from old_hash.

        Returns None when nothing changed, otherwise the new hash and the buildings.
        """
        current = self.data_hash()
        if current.hash == old_hash:
            logger.debug("Building data unchanged (hash %s)", old_hash)
            return None
        return current, self.buildings(raw_data_handler)

    def building_accessibility(self, building_id: str) -> BuildingAccessibility:
        return self._fetch(endpoints.building_accessibility(building_id), decode.decode_building_accessibility)

    def floors(self, building_id: str) -> List[Floor]:
        return self._fetch(endpoints.floors(building_id), decode.decode_floors)

    # -----------------------------------------------------------------------
    # Rooms
    # -----------------------------------------------------------------------

    def room_info(self, room_id: str) -> RoomInfo:
        return self._fetch(endpoints.room_info(room_id), decode.decode_room_info)

    def room_accessibility(self, room_id: str) -> RoomAccessibility:
        return self._fetch(endpoints.room_accessibility(room_id), decode.decode_room_accessibility)

    def timetable(self, room_id: str) -> Timetable:
        return self._fetch(endpoints.timetable(room_id), decode.decode_timetable)

    # -----------------------------------------------------------------------
    # Routing and search
    # -----------------------------------------------------------------------

    def route(
        self,
        origin: Tuple[float, float],
        destination: Tuple[float, float],
        mode: RouteMode = RouteMode.FOOT,
    ) -> Route:
        return self._fetch(endpoints.route(origin, destination, mode), decode.decode_route)

    def search(self, query: str) -> Search:
        return self._fetch(endpoints.search(query), decode.decode_search)

    # -----------------------------------------------------------------------
    # Canteens, public transport, login
    # -----------------------------------------------------------------------

    def canteen_menu(self, canteen_id: str) -> CanteenMenu:
        return self._fetch(endpoints.canteen_menu(canteen_id), decode.decode_canteen_menu)

    def departures(self, stop_name: str) -> PublicTransport:
        return self._fetch(endpoints.departures(stop_name), decode.decode_public_transport)

    def login(self, login: str, password: str) -> Login:
        """Exchange ZIH credentials for a token. Wrong credentials raise ServerReportedError."""
        return self._fetch(endpoints.login_with_password(login, password), decode.decode_login)

    def login_with_token(self, token: str) -> Login:
        return self._fetch(endpoints.login_with_token(token), decode.decode_login)

    # -----------------------------------------------------------------------
    # Resource URLs
    # -----------------------------------------------------------------------

    def resource(self, url: str) -> Resource:
        return self.resources.parse(url, Grammar.STRICT)

    def resource_url(self, resource: Resource) -> str:
        return self.resources.url(resource)
