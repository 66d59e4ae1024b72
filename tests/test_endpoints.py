import unittest

from campusnav import endpoints
from campusnav.config import Config
from campusnav.errors import InvalidQuery
from campusnav.model import RouteMode
from campusnav.normalize import Encoding


class TestEndpointPaths(unittest.TestCase):
    def test_get_endpoints(self) -> None:
        cases = [
            (endpoints.all_buildings(), "m/json_gebaeude/all", Encoding.LATIN1),
            (endpoints.data_hash(), "m/json_gebaeude/hash", Encoding.UTF8),
            (endpoints.floors("APB"), "m/json_etagen/APB", Encoding.LATIN1),
            (
                endpoints.building_accessibility("APB"),
                "api/0.1/buildinginfo/APB?accessibility=true",
                Encoding.UTF8,
            ),
            (
                endpoints.room_info("542100.2100"),
                "api/0.1/roominfo/542100.2100?accessibility=true&doorplate=true",
                Encoding.UTF8,
            ),
            (endpoints.room_accessibility("136101.0400"), "m/json_barriereinfos/raum/136101.0400", Encoding.LATIN1),
            (endpoints.timetable("136101.0400"), "m/json_belegplan/136101.0400", Encoding.LATIN1),
        ]
        for req, path, encoding in cases:
            with self.subTest(path=path):
                self.assertEqual(req.method, "GET")
                self.assertEqual(req.path, path)
                self.assertIs(req.encoding, encoding)
                self.assertIsNone(req.body())

    def test_route(self) -> None:
        req = endpoints.route((51.0254788, 13.7232886), (51.0290011, 13.7262341), RouteMode.BIKE)
        self.assertEqual(req.method, "GET")
        self.assertEqual(req.path, "routingservice/51.0254788,13.7232886/51.0290011,13.7262341/bike/geocoordinates")
        self.assertIs(req.encoding, Encoding.UTF8)

    def test_route_rejects_unknown_mode(self) -> None:
        with self.assertRaises(InvalidQuery):
            endpoints.route((51.0, 13.7), (51.1, 13.8), "bike")  # type: ignore[arg-type]
        with self.assertRaises(InvalidQuery):
            endpoints.route((51.0,), (51.1, 13.8))  # type: ignore[arg-type]

    def test_post_endpoints(self) -> None:
        self.assertEqual(endpoints.canteen_menu("m13").path, "diet/m13")
        self.assertIs(endpoints.canteen_menu("m13").encoding, Encoding.UTF8)
        self.assertEqual(endpoints.canteen_menu("m13").method, "POST")

        dep = endpoints.departures("Münchner Platz")
        self.assertEqual(dep.method, "POST")
        self.assertEqual(dep.path, "departures/M%C3%BCnchner%20Platz")
        self.assertIs(dep.encoding, Encoding.LATIN1)

    def test_identifiers_are_escaped(self) -> None:
        self.assertEqual(endpoints.floors("A/B").path, "m/json_etagen/A%2FB")
        self.assertEqual(endpoints.timetable("x?y").path, "m/json_belegplan/x%3Fy")


class TestFormBodies(unittest.TestCase):
    def test_search(self) -> None:
        req = endpoints.search("APB E023")
        self.assertEqual(req.method, "POST")
        self.assertEqual(req.path, "search")
        self.assertIs(req.encoding, Encoding.UTF8)
        self.assertEqual(req.body(), "query=APB%20E023")

    def test_login(self) -> None:
        req = endpoints.login_with_password("s1234567", "p&ss=wört")
        self.assertEqual(req.path, "m/json_login/user")
        self.assertIs(req.encoding, Encoding.LATIN1)
        self.assertEqual(req.body(), "zihlogin=s1234567&passwort=p%26ss%3Dw%C3%B6rt")

    def test_login_with_token(self) -> None:
        req = endpoints.login_with_token("Y0bXcorHzT_gbBsf261rM")
        self.assertEqual(req.path, "m/json_login/token")
        self.assertEqual(req.body(), "token=Y0bXcorHzT_gbBsf261rM")

    def test_to_request(self) -> None:
        config = Config(user_agent="campusnav-tests")
        prepared = endpoints.search("E017").to_request(config).prepare()
        self.assertEqual(prepared.method, "POST")
        self.assertEqual(prepared.url, "https://navigator.tu-dresden.de/search")
        self.assertEqual(prepared.headers["Content-Type"], "application/x-www-form-urlencoded")
        self.assertEqual(prepared.headers["User-Agent"], "campusnav-tests")
        self.assertEqual(prepared.body, "query=E017")

    def test_get_has_no_content_type(self) -> None:
        prepared = endpoints.floors("APB").to_request(Config()).prepare()
        self.assertEqual(prepared.url, "https://navigator.tu-dresden.de/m/json_etagen/APB")
        self.assertNotIn("Content-Type", prepared.headers)


class TestInvalidQuery(unittest.TestCase):
    def test_empty_identifiers(self) -> None:
        for build in (endpoints.floors, endpoints.room_info, endpoints.timetable, endpoints.departures):
            with self.subTest(builder=build.__name__):
                with self.assertRaises(InvalidQuery):
                    build("   ")

    def test_unencodable(self) -> None:
        with self.assertRaises(InvalidQuery):
            endpoints.floors("APB\ud800")
        with self.assertRaises(InvalidQuery):
            endpoints.search("E0\ud800")

    def test_empty_search(self) -> None:
        with self.assertRaises(InvalidQuery) as ctx:
            endpoints.search("")
        self.assertIn("search query", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
