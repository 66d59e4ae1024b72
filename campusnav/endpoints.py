"""
Request builders, one per endpoint.

Each builder returns an ``ApiRequest``: method, path relative to the base
URL, the encoding the endpoint actually answers in, and an optional form
body. Nothing is sent from here; invalid input raises InvalidQuery before
any network call happens.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from urllib.parse import quote, urlencode

import requests

from campusnav.config import Config
from campusnav.errors import InvalidQuery
from campusnav.model import RouteMode
from campusnav.normalize import Encoding


FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class ApiRequest:
    method: str
    path: str
    encoding: Encoding
    form: Optional[Dict[str, str]] = None

    def url(self, config: Config) -> str:
        return config.absolute(self.path)

    def body(self) -> Optional[str]:
        """
        Form body with keys and values percent-encoded (spaces as %20, not +).
        """
        if self.form is None:
            return None
        return urlencode(self.form, quote_via=quote)

    def to_request(self, config: Config) -> requests.Request:
        headers = {"User-Agent": config.user_agent}
        data = self.body()
        if data is not None:
            headers["Content-Type"] = FORM_CONTENT_TYPE
        return requests.Request(self.method, self.url(config), headers=headers, data=data)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _segment(value: str, what: str) -> str:
    """
    Percent-encode one user-supplied path segment.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidQuery(f"{what} must be a non-empty string")
    try:
        return quote(value.strip(), safe="")
    except UnicodeEncodeError as exc:
        raise InvalidQuery(f"{what} {value!r} cannot be encoded: {exc}") from exc


def _form_value(value: str, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidQuery(f"{what} must be a non-empty string")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidQuery(f"{what} cannot be encoded: {exc}") from exc
    return value


def _coordinate(point: Tuple[float, float], what: str) -> str:
    try:
        lat, lon = float(point[0]), float(point[1])
    except (TypeError, ValueError, IndexError):
        raise InvalidQuery(f"{what} must be a (lat, lon) pair, got {point!r}") from None
    return f"{lat!r},{lon!r}"


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


def all_buildings() -> ApiRequest:
    return ApiRequest("GET", "m/json_gebaeude/all", Encoding.LATIN1)


def data_hash() -> ApiRequest:
    return ApiRequest("GET", "m/json_gebaeude/hash", Encoding.UTF8)


def floors(building_id: str) -> ApiRequest:
    return ApiRequest("GET", f"m/json_etagen/{_segment(building_id, 'building id')}", Encoding.LATIN1)


def building_accessibility(building_id: str) -> ApiRequest:
    bid = _segment(building_id, "building id")
    return ApiRequest("GET", f"api/0.1/buildinginfo/{bid}?accessibility=true", Encoding.UTF8)


def room_info(room_id: str) -> ApiRequest:
    rid = _segment(room_id, "room id")
    return ApiRequest("GET", f"api/0.1/roominfo/{rid}?accessibility=true&doorplate=true", Encoding.UTF8)


def room_accessibility(room_id: str) -> ApiRequest:
    return ApiRequest("GET", f"m/json_barriereinfos/raum/{_segment(room_id, 'room id')}", Encoding.LATIN1)


def timetable(room_id: str) -> ApiRequest:
    return ApiRequest("GET", f"m/json_belegplan/{_segment(room_id, 'room id')}", Encoding.LATIN1)


def route(origin: Tuple[float, float], destination: Tuple[float, float], mode: RouteMode = RouteMode.FOOT) -> ApiRequest:
    if not isinstance(mode, RouteMode):
        raise InvalidQuery(f"unknown route mode {mode!r}")
    o = _coordinate(origin, "origin")
    d = _coordinate(destination, "destination")
    return ApiRequest("GET", f"routingservice/{o}/{d}/{mode.value}/geocoordinates", Encoding.UTF8)


def search(query: str) -> ApiRequest:
    return ApiRequest("POST", "search", Encoding.UTF8, form={"query": _form_value(query, "search query")})


def canteen_menu(canteen_id: str) -> ApiRequest:
    return ApiRequest("POST", f"diet/{_segment(canteen_id, 'canteen id')}", Encoding.UTF8)


def departures(stop_name: str) -> ApiRequest:
    return ApiRequest("POST", f"departures/{_segment(stop_name, 'stop name')}", Encoding.LATIN1)


def login_with_password(login: str, password: str) -> ApiRequest:
    form = {
        "zihlogin": _form_value(login, "login"),
        "passwort": _form_value(password, "password"),
    }
    return ApiRequest("POST", "m/json_login/user", Encoding.LATIN1, form=form)


def login_with_token(token: str) -> ApiRequest:
    return ApiRequest("POST", "m/json_login/token", Encoding.LATIN1, form={"token": _form_value(token, "token")})
