import unittest

import context  # noqa: F401

from hn_thread.navigation import NoSelection, Selected, back, parse_route, route_path, select


class TestNavigation(unittest.TestCase):
    def test_transitions(self):
        state = NoSelection()

        state = select(state, 8863)
        assert state == Selected(8863)

        state = back(state)
        assert state == NoSelection()

    def test_ids_are_not_validated(self):
        assert select(NoSelection(), -1) == Selected(-1)
        assert select(NoSelection(), 0).story_id == 0

    def test_routes_round_trip(self):
        for state in [NoSelection(), Selected(1), Selected(8863)]:
            assert parse_route(route_path(state)) == state

    def test_route_paths(self):
        assert route_path(NoSelection()) == "/"
        assert route_path(Selected(42)) == "/story/42"
        assert parse_route("/story/42/") == Selected(42)

    def test_unknown_route(self):
        for path in ["/story/", "/story/abc", "/test"]:
            with self.assertRaises(ValueError):
                parse_route(path)


if __name__ == "__main__":
    unittest.main()
