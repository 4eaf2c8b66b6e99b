import unittest
from datetime import datetime, timedelta, timezone

from devcamper.core.errors import ValidationFailed
from devcamper.models.bootcamp import Bootcamp
from devcamper.services.advanced_results import advanced_results, coerce_filter_value
from devcamper.services.query_translator import translate
from devcamper.services.serializers import BOOTCAMPS
from tests.base import CAMBRIDGE, NEW_YORK, ApiTestBase


class AdvancedResultsTests(ApiTestBase):
    def setUp(self):
        super().setUp()
        self.owner = self.create_user(role="publisher")
        self.other_owner = self.create_user(role="publisher")
        start = datetime(2026, 3, 1, tzinfo=timezone.utc)
        self.ids = {}
        rows = [
            ("Alpha", 100, ["Web Development"], None, self.owner),
            ("Bravo", 200, ["Web Development", "Data Science"], CAMBRIDGE, self.owner),
            ("Charlie", 300, ["Business"], NEW_YORK, self.other_owner),
            ("Delta", 400, ["Data Science"], NEW_YORK, self.other_owner),
        ]
        for offset, (name, cost, careers, location, owner) in enumerate(rows):
            extra = {"location": location} if location else {}
            self.ids[name] = self.create_bootcamp(
                owner, name, average_cost=cost, careers=careers,
                created_at=start + timedelta(hours=offset), **extra,
            )

    def _run(self, *pairs):
        with self.SessionLocal() as db:
            return advanced_results(db, BOOTCAMPS, translate(list(pairs)))

    def _names(self, *pairs):
        return [item["name"] for item in self._run(*pairs)["data"]]

    def test_default_sort_newest_first(self):
        self.assertEqual(self._names(), ["Delta", "Charlie", "Bravo", "Alpha"])

    def test_sort_by_multiple_keys(self):
        self.assertEqual(
            self._names(("sort", "location.state,-averageCost")),
            ["Bravo", "Alpha", "Delta", "Charlie"],
        )

    def test_unknown_sort_field_is_ignored(self):
        result = self._run(("sort", "bogus"))
        self.assertEqual(result["count"], 4)
        self.assertEqual([item["id"] for item in result["data"]], sorted(self.ids.values()))

    def test_comparison_bounds_combine(self):
        self.assertEqual(
            self._names(("averageCost[gt]", "100"), ("averageCost[lte]", "300"), ("sort", "averageCost")),
            ["Bravo", "Charlie"],
        )

    def test_in_on_scalar_field(self):
        self.assertEqual(
            self._names(("name[in]", "Alpha,Delta,Zulu"), ("sort", "name")),
            ["Alpha", "Delta"],
        )

    def test_equality_on_list_field_is_membership(self):
        self.assertEqual(self._names(("careers", "Data Science"), ("sort", "name")), ["Bravo", "Delta"])

    def test_array_equality_on_list_field_requires_all_members(self):
        names = self._names(("careers[]", "Web Development"), ("careers[]", "Data Science"))
        self.assertEqual(names, ["Bravo"])

    def test_reference_field_filter(self):
        names = self._names(("user", self.other_owner), ("sort", "name"))
        self.assertEqual(names, ["Charlie", "Delta"])

    def test_embedded_object_and_unknown_operator_match_nothing(self):
        self.assertEqual(self._names(("name[first]", "Alpha")), [])
        self.assertEqual(self._names(("averageCost[ne]", "100")), [])

    def test_dollar_operator_injection_is_stripped(self):
        self.assertEqual(len(self._names(("name[$ne]", "nobody"))), 4)

    def test_repeated_plain_key_keeps_last_value(self):
        self.assertEqual(self._names(("name", "Alpha"), ("name", "Delta")), ["Delta"])

    def test_total_ignores_window(self):
        result = self._run(("careers[in]", "Web Development,Business"), ("limit", "2"), ("page", "2"))
        self.assertEqual(result["pagination"], {"currentPage": 2, "limit": 2, "total": 3, "prev": {"page": 1, "limit": 2}})
        self.assertEqual(result["count"], 1)

    def test_page_beyond_range_is_empty(self):
        result = self._run(("page", "9"), ("limit", "2"))
        self.assertEqual(result["data"], [])
        self.assertEqual(result["pagination"]["total"], 4)
        self.assertNotIn("next", result["pagination"])

    def test_select_keeps_whole_embedded_object(self):
        result = self._run(("select", "name,location"), ("limit", "1"))
        item = result["data"][0]
        self.assertEqual(set(item), {"id", "name", "location"})
        self.assertEqual(item["id"], self.ids["Delta"])
        self.assertEqual(item["location"]["city"], "New York")
        self.assertIn("coordinates", item["location"])

    def test_select_dotted_path_trims_embedded_object(self):
        result = self._run(("select", "name,location.city,location.state"), ("sort", "name"), ("limit", "2"))
        self.assertEqual(
            result["data"],
            [
                {"id": self.ids["Alpha"], "name": "Alpha", "location": {"city": "Boston", "state": "MA"}},
                {"id": self.ids["Bravo"], "name": "Bravo", "location": {"city": "Cambridge", "state": "MA"}},
            ],
        )

    def test_list_membership_treats_wildcards_literally(self):
        self.create_bootcamp(self.owner, "Echo", careers=["UI/UX"])
        self.assertEqual(self._names(("careers", "UI/UX")), ["Echo"])
        self.assertEqual(self._names(("careers", "UI_UX")), [])
        self.assertEqual(self._names(("careers", "%")), [])
        self.assertEqual(self._names(("careers[in]", "_,%")), [])

    def test_created_at_filter_accepts_dates(self):
        names = self._names(("createdAt[gte]", "2026-03-01T02:00:00Z"), ("sort", "name"))
        self.assertEqual(names, ["Charlie", "Delta"])


class CoerceFilterValueTests(unittest.TestCase):
    def test_numbers(self):
        self.assertEqual(coerce_filter_value("averageCost", Bootcamp.average_cost, " 12.5 "), 12.5)
        with self.assertRaises(ValidationFailed):
            coerce_filter_value("averageCost", Bootcamp.average_cost, "12abc")

    def test_booleans(self):
        self.assertIs(coerce_filter_value("housing", Bootcamp.housing, "true"), True)
        self.assertIs(coerce_filter_value("housing", Bootcamp.housing, "0"), False)
        with self.assertRaises(ValidationFailed):
            coerce_filter_value("housing", Bootcamp.housing, "maybe")

    def test_ids(self):
        with self.assertRaises(ValidationFailed) as ctx:
            coerce_filter_value("user", Bootcamp.user_id, "not-a-uuid")
        self.assertEqual(ctx.exception.status_code, 400)

    def test_strings_pass_through(self):
        self.assertEqual(coerce_filter_value("name", Bootcamp.name, "gt"), "gt")


if __name__ == "__main__":
    unittest.main()
