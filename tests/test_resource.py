"""
Unit tests for resource URL parsing and rendering.

Two grammars:
- STRICT: canonical site paths with a keyword (gebaeude, etplan, raum, ...)
- LENIENT: keyword-free search result links, told apart by segment count
"""

import unittest

from campusnav.config import Config
from campusnav.errors import InvalidResourcePath
from campusnav.model import RouteMode
from campusnav.resource import (
    BuildingAccessibilityResource,
    BuildingResource,
    CoordinateResource,
    FloorResource,
    Grammar,
    LectureHallsResource,
    MapResource,
    ResourceCodec,
    RoomOnFloorResource,
    RoomResource,
    RouteResource,
    parse_resource,
    render_path,
)


ALL_RESOURCES = [
    CoordinateResource(lat=13.732, lon=51.02839999999999, zoom=15),
    CoordinateResource(lat=-1.5, lon=0.0, zoom=1),
    MapResource(region="dresden", building="apb"),
    RouteResource(origin="APB", destination="WEB", mode=RouteMode.BIKE),
    RouteResource(origin="APB", destination="WEB", mode=RouteMode.FOOT),
    BuildingResource(building="apb"),
    BuildingAccessibilityResource(building="biz"),
    LectureHallsResource(building="apb"),
    FloorResource(building="apb", floor="00"),
    FloorResource(building="apb", floor="-1"),
    RoomOnFloorResource(building="biz", floor="02", room="062102.0020"),
    RoomResource(building="apb", floor="00", room="542100.2310"),
    # segments that need escaping
    BuildingResource(building="Haus A/B"),
    MapResource(region="Tharandt Forst", building="Zeu?#"),
]


class TestStrictParse(unittest.TestCase):
    def test_valid_urls(self) -> None:
        valid = [
            "https://navigator.tu-dresden.de/@13.732,51.02839999999999,15.z",
            "https://navigator.tu-dresden.de/raum/apb/00/542100.2230",
            "https://navigator.tu-dresden.de/etplan/apb/00/raum/542100.2230",
            "https://navigator.tu-dresden.de/gebaeude/apb",
            "https://navigator.tu-dresden.de/karten/dresden/geb/apb",
            "https://navigator.tu-dresden.de/etplan/apb/00",
            "https://navigator.tu-dresden.de/karten/johannstadt/geb/biz",
            "http://navigator.tu-dresden.de/raum/biz/02/062102.0020",
            "https://www.navigator.tu-dresden.de/raum/biz/02/062102.0020?d=00.80",
            "https://navigator.tu-dresden.de/barrierefrei/apb",
            "https://navigator.tu-dresden.de/hoersaele/apb",
            "/karten/dresden/geb/apb",
            "karten/dresden/geb/apb",
            "https://navigator.tu-dresden.de/routing/APB/WEB/foot,shortest/@13.755,51.03800000000001,12.z",
        ]
        for url in valid:
            with self.subTest(url=url):
                parse_resource(url)

    def test_invalid_urls(self) -> None:
        invalid = [
            "https://navigator.tu-dresden.de/@13.732,51.02839999999999",
            "https://navigator.tu-dresden.de/@13.732",
            "https://navigator.tu-dresden.de/@abc,51.0,15.z",
            "https://navigator.tu-dresden.de/@13.7,51.0,fifteen.z",
            "https://navigator.tu-dresden.de/13.732,51.02839999999999,15.z",
            "https://navigator.tu-dresden.de/apb/00/542100.2230",
            "https://navigator.tu-dresden.de/etplan/apb/00/542100.2230",
            "https://navigator.tu-dresden.de/etplan/apb/00/zimmer/542100.2230",
            "https://navigator.tu-dresden.de/gebaede/biz",
            "https://navigator.tu-dresden.de/etplan//00",
            "https://navigator.tu-dresden.de/etplan/apb",
            "https://navigator.tu-dresden.de/gebaeude/biz/00",
            "https://navigator.tu-dresden.de/gebaeude/",
            "https://navigator.tu-dresden.de/gebaeude//",
            "https://navigator.tu-dresden.de/barrierefrei/apb/00",
            "https://navigator.tu-dresden.de/barrierefrei",
            "https://navigator.tu-dresden.de/hoersaele/",
            "https://navigator.tu-dresden.de/karten/geb/apb",
            "https://navigator.tu-dresden.de/raum/02/062102.0020",
            "https://navigator.tu-dresden.de/routing/APB/WEB/foot,shortest",
            "https://navigator.tu-dresden.de/",
            "",
        ]
        for url in invalid:
            with self.subTest(url=url):
                with self.assertRaises(InvalidResourcePath) as ctx:
                    parse_resource(url)
                self.assertEqual(ctx.exception.path, url)

    def test_coordinate(self) -> None:
        res = parse_resource("https://navigator.tu-dresden.de/@13.732,51.0284,15.z")
        self.assertEqual(res, CoordinateResource(lat=13.732, lon=51.0284, zoom=15))

        # bare "z" suffix is accepted as well
        self.assertEqual(parse_resource("/@1.0,2.0,3z"), CoordinateResource(lat=1.0, lon=2.0, zoom=3))

    def test_coordinate_rejects_loose_numbers(self) -> None:
        # float() and int() would accept these, but they don't render back the same
        for path in ["/@1_0,2,3.z", "/@1.0,2.0,1_5.z", "/@1.0,%202.0,3.z", "/@1.0,2.0%20,3.z"]:
            with self.subTest(path=path):
                with self.assertRaises(InvalidResourcePath):
                    parse_resource(path)

    def test_map_region(self) -> None:
        self.assertEqual(
            parse_resource("/karten/dresden/geb/apb"),
            MapResource(region="dresden", building="apb"),
        )

    def test_route_mode(self) -> None:
        res = parse_resource("/routing/APB/WEB/bike,shortest/@13.7,51.0,12.z")
        self.assertEqual(res, RouteResource(origin="APB", destination="WEB", mode=RouteMode.BIKE))

        # unknown modes fall back to foot
        res = parse_resource("/routing/APB/WEB/hoverboard,shortest/@13.7,51.0,12.z")
        self.assertEqual(res.mode, RouteMode.FOOT)

    def test_end_to_end_room_on_floor(self) -> None:
        path = "/etplan/biz/02/raum/062102.0020"
        res = parse_resource(path)
        self.assertEqual(res, RoomOnFloorResource(building="biz", floor="02", room="062102.0020"))
        self.assertEqual(render_path(res), path)

    def test_room_ignores_door_query(self) -> None:
        res = parse_resource("https://navigator.tu-dresden.de/raum/biz/02/062102.0020?d=00.80")
        self.assertEqual(res, RoomResource(building="biz", floor="02", room="062102.0020"))


class TestLenientParse(unittest.TestCase):
    def test_map_region(self) -> None:
        self.assertEqual(
            parse_resource("dresden/geb/apb", Grammar.LENIENT),
            MapResource(region="dresden", building="apb"),
        )

    def test_room(self) -> None:
        self.assertEqual(
            parse_resource("apb/00/raum/542100.2230", Grammar.LENIENT),
            RoomResource(building="apb", floor="00", room="542100.2230"),
        )

    def test_invalid(self) -> None:
        for fragment in ["apb/00", "apb/00/", "dresden/geb/apb/00/062102.0020", ""]:
            with self.subTest(fragment=fragment):
                with self.assertRaises(InvalidResourcePath):
                    parse_resource(fragment, Grammar.LENIENT)

    def test_grammars_stay_separate(self) -> None:
        # a valid lenient link is not a site URL
        with self.assertRaises(InvalidResourcePath):
            parse_resource("dresden/geb/apb")


class TestRender(unittest.TestCase):
    def test_round_trip(self) -> None:
        for res in ALL_RESOURCES:
            with self.subTest(resource=res):
                self.assertEqual(parse_resource(render_path(res)), res)

    def test_paths(self) -> None:
        self.assertEqual(render_path(CoordinateResource(lat=1.0, lon=1.0, zoom=1)), "/@1.0,1.0,1.z")
        self.assertEqual(render_path(MapResource(region="dresden", building="apb")), "/karten/dresden/geb/apb")
        self.assertEqual(render_path(BuildingResource(building="apb")), "/gebaeude/apb")
        self.assertEqual(render_path(BuildingAccessibilityResource(building="apb")), "/barrierefrei/apb")
        self.assertEqual(render_path(LectureHallsResource(building="apb")), "/hoersaele/apb")
        self.assertEqual(render_path(FloorResource(building="apb", floor="00")), "/etplan/apb/00")
        self.assertEqual(
            render_path(RoomResource(building="apb", floor="00", room="542100.2220")),
            "/raum/apb/00/542100.2220",
        )
        self.assertEqual(
            render_path(RouteResource(origin="APB", destination="WEB"), route_viewport="@13.7,51.0,12.z"),
            "/routing/APB/WEB/foot,shortest/@13.7,51.0,12.z",
        )

    def test_segments_are_escaped(self) -> None:
        self.assertEqual(render_path(BuildingResource(building="Haus A/B")), "/gebaeude/Haus%20A%2FB")

    def test_codec_url(self) -> None:
        codec = ResourceCodec(Config(base_url="https://navigator.example.org/sub"))
        self.assertEqual(
            codec.url(BuildingResource(building="apb")),
            "https://navigator.example.org/sub/gebaeude/apb",
        )
        self.assertEqual(codec.parse(codec.url(BuildingResource(building="apb"))), BuildingResource(building="apb"))

    def test_codec_with_sub_path_round_trip(self) -> None:
        codec = ResourceCodec(Config(base_url="https://navigator.example.org/sub/"))
        for res in ALL_RESOURCES:
            with self.subTest(resource=res):
                self.assertEqual(codec.parse(codec.url(res)), res)

        # URLs outside the sub path are still read as site paths
        self.assertEqual(codec.parse("/gebaeude/apb"), BuildingResource(building="apb"))

        with self.assertRaises(InvalidResourcePath) as ctx:
            codec.parse("https://navigator.example.org/sub/gebaede/apb")
        self.assertEqual(ctx.exception.path, "https://navigator.example.org/sub/gebaede/apb")

    def test_not_a_resource(self) -> None:
        with self.assertRaises(TypeError):
            render_path("gebaeude/apb")  # type: ignore[arg-type]


class TestBuildingID(unittest.TestCase):
    def test_building_id(self) -> None:
        self.assertIsNone(CoordinateResource(lat=1.0, lon=1.0, zoom=1).building_id)
        self.assertIsNone(RouteResource(origin="APB", destination="WEB").building_id)
        self.assertEqual(MapResource(region="dresden", building="apb").building_id, "apb")
        self.assertEqual(BuildingResource(building="apb").building_id, "apb")
        self.assertEqual(LectureHallsResource(building="apb").building_id, "apb")
        self.assertEqual(FloorResource(building="apb", floor="00").building_id, "apb")
        self.assertEqual(RoomOnFloorResource(building="apb", floor="00", room="x").building_id, "apb")
        self.assertEqual(RoomResource(building="apb", floor="00", room="x").building_id, "apb")

    def test_variants_are_distinct(self) -> None:
        self.assertNotEqual(MapResource(region="r", building="b"), BuildingResource(building="b"))
        self.assertNotEqual(
            RoomOnFloorResource(building="b", floor="00", room="r"),
            RoomResource(building="b", floor="00", room="r"),
        )


if __name__ == "__main__":
    unittest.main()
