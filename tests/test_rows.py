import unittest
from dataclasses import replace
from datetime import date

from meetingdiff.models import Format, Meeting, ServiceBody
from meetingdiff.rows import build_row, changed_cells, spreadsheet_headers


class RowBuilderTests(unittest.TestCase):
    def _meeting(self, **kwargs):
        base = dict(
            bmlt_id=42,
            name="Serenity Now",
            day=2,
            service_body_bmlt_id=5,
            start_time="19:00:00",
            world_id="G00042",
            location_text="St. Mark's",
            location_street="1 Main St",
            location_municipality="Springfield",
            published=True,
            last_changed=date(2023, 1, 15),
            latitude=40.1,
            longitude=-75.2,
            time_zone="America/New_York",
            formats=(Format(world_id="OPEN", name="Open"), Format(name="Candlelight"), Format(world_id="VM")),
        )
        base.update(kwargs)
        return Meeting(**base)

    def setUp(self):
        self.bodies = [ServiceBody(5, name="Springfield Area", world_id="AR5")]

    def test_headers_width_matches_rows(self):
        for show in (False, True):
            headers = spreadsheet_headers(show)
            self.assertEqual(len(build_row(self._meeting(), self.bodies, show)), len(headers))
        self.assertEqual(spreadsheet_headers(True)[:3], ["Committee", "Original", "CommitteeName"])
        self.assertEqual(spreadsheet_headers(False)[-1], "bmlt_id")

    def test_row_projection(self):
        headers = spreadsheet_headers(False)
        row = dict(zip(headers, build_row(self._meeting(), self.bodies)))
        self.assertEqual(row["Committee"], "G00042")
        self.assertEqual(row["AreaRegion"], "AR5")
        self.assertEqual(row["ParentName"], "Springfield Area")
        self.assertEqual(row["Day"], "Monday")
        self.assertEqual(row["Room"], "Candlelight")
        self.assertEqual(row["Closed"], "OPEN")
        self.assertEqual(row["WheelChr"], "FALSE")
        self.assertEqual(row["Format1"], "VM")
        self.assertEqual(row["Language2"], "")
        self.assertEqual(row["unpublished"], "")
        self.assertEqual(row["LastChanged"], "01/15/2023")
        self.assertEqual(row["bmlt_id"], 42)

    def test_unpublished_and_nulls(self):
        headers = spreadsheet_headers(False)
        row = dict(zip(headers, build_row(self._meeting(published=False, location_text=None), self.bodies)))
        self.assertEqual(row["unpublished"], "1")
        self.assertEqual(row["Place"], "")
        self.assertNotIn(None, row.values())

    def test_only_place_changes(self):
        old = self._meeting()
        new = replace(old, location_text="St. Luke's")
        cols = changed_cells(build_row(old, self.bodies), build_row(new, self.bodies))
        self.assertEqual(cols, [spreadsheet_headers(False).index("Place")])

    def test_none_and_empty_compare_equal(self):
        self.assertEqual(changed_cells([None, 1, "a"], ["", 1, "b"]), [2])


if __name__ == "__main__":
    unittest.main()
