import unittest
from dataclasses import replace

from meetingdiff.changes import process_changes, process_event
from meetingdiff.errors import GenerationError, MalformedEvent, UnknownEventType
from meetingdiff.models import (
    STYLE_CHANGED,
    STYLE_DELETED,
    STYLE_NEW,
    ChangeEvent,
    Format,
    Meeting,
    Touched,
)
from meetingdiff.rows import spreadsheet_headers


class ChangeProcessorTests(unittest.TestCase):
    def _meeting(self, bmlt_id=7, world_id="G1", **kwargs):
        return Meeting(bmlt_id=bmlt_id, world_id=world_id, name="Meeting %d" % bmlt_id, **kwargs)

    def test_created_row_styled_new(self):
        meeting = self._meeting(formats=(Format(world_id="OPEN"),))
        row, touched = process_event(ChangeEvent("MeetingCreated", new_meeting=meeting), Touched(), [])
        headers = spreadsheet_headers(False)
        self.assertEqual(row.values[headers.index("Closed")], "OPEN")
        self.assertEqual(row.values[headers.index("Committee")], "G1")
        self.assertEqual(set(row.styles.values()), {STYLE_NEW})
        self.assertEqual(len(row.styles), len(headers))
        self.assertEqual(touched, Touched(frozenset({"G1"}), frozenset({7})))

    def test_created_without_world_id(self):
        _, touched = process_event(ChangeEvent("MeetingCreated", new_meeting=self._meeting(world_id=None)), Touched(), [])
        self.assertEqual(touched.world_ids, frozenset())
        self.assertEqual(touched.bmlt_ids, frozenset({7}))

    def test_deleted_tracks_world_id_only(self):
        event = ChangeEvent("MeetingDeleted", old_meeting=self._meeting(world_id="g123"))
        row, touched = process_event(event, Touched(), [])
        self.assertEqual(set(row.styles.values()), {STYLE_DELETED})
        self.assertEqual(touched.world_ids, frozenset({"G123"}))
        self.assertEqual(touched.bmlt_ids, frozenset())

    def test_updated_marks_changed_cells(self):
        old = self._meeting(location_text="Library")
        new = replace(old, location_text="Church", world_id="G2")
        row, touched = process_event(ChangeEvent("MeetingUpdated", old_meeting=old, new_meeting=new), Touched(), [])
        headers = spreadsheet_headers(False)
        self.assertEqual(row.values[headers.index("Place")], "Church")
        self.assertEqual(row.styles, {headers.index("Committee"): STYLE_CHANGED, headers.index("Place"): STYLE_CHANGED})
        self.assertEqual(touched.world_ids, frozenset({"G1", "G2"}))
        self.assertEqual(touched.bmlt_ids, frozenset({7}))

    def test_updated_without_differences_has_no_styles(self):
        meeting = self._meeting()
        row, _ = process_event(ChangeEvent("MeetingUpdated", old_meeting=meeting, new_meeting=meeting), Touched(), [])
        self.assertEqual(row.styles, {})

    def test_input_touched_not_mutated(self):
        start = Touched()
        process_event(ChangeEvent("MeetingCreated", new_meeting=self._meeting()), start, [])
        self.assertEqual(start, Touched())

    def test_rows_follow_event_order(self):
        events = [
            ChangeEvent("MeetingDeleted", old_meeting=self._meeting(1)),
            ChangeEvent("MeetingCreated", new_meeting=self._meeting(2)),
            ChangeEvent("MeetingUpdated", old_meeting=self._meeting(3), new_meeting=self._meeting(3)),
        ]
        rows, touched = process_changes(events, [])
        self.assertEqual([r.values[-1] for r in rows], [1, 2, 3])
        self.assertEqual(touched.bmlt_ids, frozenset({2, 3}))

    def test_event_missing_its_meeting(self):
        cases = [
            (ChangeEvent("MeetingCreated"), "new_meeting"),
            (ChangeEvent("MeetingDeleted", new_meeting=self._meeting()), "old_meeting"),
            (ChangeEvent("MeetingUpdated", old_meeting=self._meeting()), "new_meeting"),
        ]
        for event, missing in cases:
            with self.assertRaises(MalformedEvent) as ctx:
                process_changes([event], [])
            self.assertIsInstance(ctx.exception, GenerationError)
            self.assertIn(event.event_type, str(ctx.exception))
            self.assertEqual(ctx.exception.missing, missing)

    def test_unknown_event_type_aborts(self):
        events = [
            ChangeEvent("MeetingCreated", new_meeting=self._meeting(1)),
            ChangeEvent("Bogus"),
        ]
        with self.assertRaises(UnknownEventType) as ctx:
            process_changes(events, [])
        self.assertIn("Bogus", str(ctx.exception))
        self.assertEqual(ctx.exception.event_type, "Bogus")


if __name__ == "__main__":
    unittest.main()
