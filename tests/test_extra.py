import unittest

from meetingdiff.changes import process_changes
from meetingdiff.extra import extra_meeting_rows, select_extra_meetings
from meetingdiff.models import ChangeEvent, Meeting, Touched


class ExtraMeetingTests(unittest.TestCase):
    def test_deleted_world_id_pulls_in_case_insensitive_match(self):
        _, touched = process_changes([ChangeEvent("MeetingDeleted", old_meeting=Meeting(1, world_id="g123"))], [])
        current = [Meeting(2, world_id="G123"), Meeting(3, world_id="G999")]
        self.assertEqual([m.bmlt_id for m in select_extra_meetings(current, touched)], [2])

    def test_already_touched_bmlt_id_skipped(self):
        touched = Touched(frozenset({"G1"}), frozenset({5}))
        current = [Meeting(5, world_id="G1"), Meeting(6, world_id="g1")]
        self.assertEqual([m.bmlt_id for m in select_extra_meetings(current, touched)], [6])

    def test_sentinel_never_included(self):
        touched = Touched(frozenset({"X"}), frozenset())
        current = [Meeting(1, world_id="X"), Meeting(2, world_id="x"), Meeting(3)]
        self.assertEqual(select_extra_meetings(current, touched), [])

    def test_order_follows_input_and_rows_unstyled(self):
        touched = Touched(frozenset({"G1", "G2"}), frozenset())
        current = [Meeting(9, world_id="G2"), Meeting(4, world_id="G1")]
        rows = extra_meeting_rows(current, touched, [])
        self.assertEqual([r.values[-1] for r in rows], [9, 4])
        self.assertTrue(all(r.styles == {} for r in rows))


if __name__ == "__main__":
    unittest.main()
