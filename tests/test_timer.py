"""Tests for the Timer record and the time helpers.

Covers: tracker.core.timer, tracker.util.misc
"""

import unittest


# ──────────────────────────────────────────────────────────────────────────
# timer.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestTimer(unittest.TestCase):
    """Elapsed bookkeeping with explicit timestamps."""

    def test_new_timer_defaults(self):
        from tracker.core.timer import Timer
        t = Timer()
        self.assertEqual(t.name, "<empty>")
        self.assertEqual(t.elapsed, 0.0)
        self.assertFalse(t.running)
        self.assertIsNone(t.resumed_at)
        self.assertIsNone(t.workspace_id)
        self.assertFalse(t.auto_paused)
        self.assertFalse(t.selected)
        self.assertTrue(t.id)

    def test_new_timers_get_unique_ids(self):
        from tracker.core.timer import Timer
        ids = {Timer().id for _ in range(50)}
        self.assertEqual(len(ids), 50)

    def test_current_elapsed_while_paused_is_stored_value(self):
        from tracker.core.timer import Timer
        t = Timer(elapsed=42.5)
        self.assertEqual(t.current_elapsed(1000.0), 42.5)
        self.assertEqual(t.current_elapsed(-5.0), 42.5)

    def test_current_elapsed_while_running(self):
        from tracker.core.timer import Timer
        t = Timer(elapsed=100.0)
        t.start(10.0)
        self.assertAlmostEqual(t.current_elapsed(12.5), 102.5)
        # Stored value only moves at pause/reset/freeze
        self.assertEqual(t.elapsed, 100.0)

    def test_negative_delta_clamped(self):
        from tracker.core.timer import Timer
        t = Timer(elapsed=7.0)
        t.start(50.0)
        self.assertEqual(t.current_elapsed(40.0), 7.0)
        t.pause(40.0)
        self.assertEqual(t.elapsed, 7.0)

    def test_start_sets_running_pair(self):
        from tracker.core.timer import Timer
        t = Timer()
        t.start(3.0)
        self.assertTrue(t.running)
        self.assertEqual(t.resumed_at, 3.0)

    def test_start_when_running_is_noop(self):
        from tracker.core.timer import Timer
        t = Timer()
        t.start(3.0)
        t.start(9.0)
        self.assertEqual(t.resumed_at, 3.0)

    def test_start_then_pause_same_instant_keeps_elapsed(self):
        from tracker.core.timer import Timer
        t = Timer(elapsed=61.0)
        t.start(500.0)
        t.pause(500.0)
        self.assertEqual(t.elapsed, 61.0)
        self.assertFalse(t.running)
        self.assertIsNone(t.resumed_at)

    def test_pause_folds_elapsed(self):
        from tracker.core.timer import Timer
        t = Timer(elapsed=1.0)
        t.start(10.0)
        t.pause(15.0)
        self.assertAlmostEqual(t.elapsed, 6.0)

    def test_pause_when_paused_is_noop(self):
        from tracker.core.timer import Timer
        t = Timer(elapsed=5.0, auto_paused=True)
        t.pause(99.0)
        self.assertEqual(t.elapsed, 5.0)
        self.assertTrue(t.auto_paused)

    def test_auto_pause_flag(self):
        from tracker.core.timer import Timer
        t = Timer()
        t.start(0.0)
        t.pause(1.0, auto=True)
        self.assertTrue(t.auto_paused)
        t.start(2.0)
        self.assertFalse(t.auto_paused)
        t.pause(3.0)
        self.assertFalse(t.auto_paused)

    def test_reset_paused_timer(self):
        from tracker.core.timer import Timer
        t = Timer(elapsed=500.0)
        t.reset(20.0)
        self.assertEqual(t.elapsed, 0.0)
        self.assertFalse(t.running)
        self.assertIsNone(t.resumed_at)

    def test_reset_running_timer_keeps_running(self):
        from tracker.core.timer import Timer
        t = Timer(elapsed=500.0)
        t.start(10.0)
        t.reset(30.0)
        self.assertEqual(t.elapsed, 0.0)
        self.assertTrue(t.running)
        self.assertEqual(t.resumed_at, 30.0)
        self.assertAlmostEqual(t.current_elapsed(35.0), 5.0)

    def test_freeze_keeps_running(self):
        from tracker.core.timer import Timer
        t = Timer()
        t.start(0.0)
        t.freeze(4.0)
        self.assertTrue(t.running)
        self.assertAlmostEqual(t.elapsed, 4.0)
        self.assertEqual(t.resumed_at, 4.0)
        self.assertAlmostEqual(t.current_elapsed(6.0), 6.0)

    def test_set_elapsed_clamps_and_reanchors(self):
        from tracker.core.timer import Timer
        t = Timer()
        t.set_elapsed(-10, 0.0)
        self.assertEqual(t.elapsed, 0.0)
        t.start(1.0)
        t.set_elapsed(3600, 8.0)
        self.assertEqual(t.elapsed, 3600.0)
        self.assertEqual(t.resumed_at, 8.0)

    def test_rename_and_workspace(self):
        from tracker.core.timer import Timer
        t = Timer()
        t.rename("Writing")
        t.set_workspace(2)
        self.assertEqual(t.name, "Writing")
        self.assertEqual(t.workspace_id, 2)
        t.set_workspace(None)
        self.assertIsNone(t.workspace_id)


class TestTimerRecords(unittest.TestCase):
    """Record conversion and validation."""

    def test_to_record_excludes_resume_timestamp(self):
        from tracker.core.timer import Timer, RECORD_KEYS
        t = Timer(id="a", name="A")
        t.start(5.0)
        record = t.to_record()
        self.assertEqual(tuple(record), RECORD_KEYS)
        self.assertNotIn("resumed_at", record)

    def test_from_record_running_reanchored(self):
        from tracker.core.timer import Timer
        t = Timer.from_record({"id": "x", "name": "X", "elapsed": 10, "running": True}, now=77.0)
        self.assertTrue(t.running)
        self.assertEqual(t.resumed_at, 77.0)
        self.assertEqual(t.elapsed, 10.0)

    def test_from_record_paused_has_no_resume(self):
        from tracker.core.timer import Timer
        t = Timer.from_record({"id": "x", "elapsed": 3.5}, now=77.0)
        self.assertFalse(t.running)
        self.assertIsNone(t.resumed_at)
        self.assertEqual(t.name, "<empty>")

    def test_from_record_missing_id_gets_fresh_one(self):
        from tracker.core.timer import Timer
        t = Timer.from_record({"name": "No id"}, now=0.0)
        self.assertTrue(t.id)

    def test_from_record_legacy_keys(self):
        from tracker.core.timer import Timer
        t = Timer.from_record({
            "id": "old", "name": "Old", "timeElapsed": 12.0, "running": False,
            "workspaceId": 3, "wasRunningBeforePause": True,
        }, now=0.0)
        self.assertEqual(t.elapsed, 12.0)
        self.assertEqual(t.workspace_id, 3)
        self.assertTrue(t.auto_paused)

    def test_from_record_rejects_bad_fields(self):
        from tracker.core.timer import Timer
        bad_records = [
            ["not", "a", "dict"],
            {"id": 5},
            {"name": 12},
            {"elapsed": "ten"},
            {"elapsed": True},
            {"elapsed": -1},
            {"elapsed": float("nan")},
            {"workspace_id": "1"},
            {"workspace_id": 1.5},
        ]
        for record in bad_records:
            with self.subTest(record=record):
                with self.assertRaises(ValueError):
                    Timer.from_record(record, now=0.0)

    def test_aggregate(self):
        from tracker.core.timer import Timer, aggregate, is_selected
        a = Timer(elapsed=10.0, selected=True)
        b = Timer(elapsed=20.0)
        c = Timer(elapsed=5.0, selected=True)
        c.start(100.0)
        self.assertAlmostEqual(aggregate([a, b, c], 110.0), 45.0)
        self.assertAlmostEqual(aggregate([a, b, c], 110.0, is_selected), 25.0)
        self.assertEqual(aggregate([], 0.0), 0)


# ──────────────────────────────────────────────────────────────────────────
# misc.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestTimeHelpers(unittest.TestCase):

    def test_format_time(self):
        from tracker.util.misc import format_time
        self.assertEqual(format_time(0), "00:00:00")
        self.assertEqual(format_time(3661), "01:01:01")
        self.assertEqual(format_time(59.99), "00:00:59")
        self.assertEqual(format_time(-30), "00:00:00")
        self.assertEqual(format_time(100 * 3600), "100:00:00")

    def test_parse_time_input_valid(self):
        from tracker.util.misc import parse_time_input
        self.assertEqual(parse_time_input("45"), 45)
        self.assertEqual(parse_time_input("2:05"), 125)
        self.assertEqual(parse_time_input("01:01:01"), 3661)
        self.assertEqual(parse_time_input(" 1:0:0 "), 3600)

    def test_parse_time_input_invalid(self):
        from tracker.util.misc import parse_time_input
        for text in ("", "abc", "1:2:3:4", "123", "1::2", "-5", "1:60x", None):
            with self.subTest(text=text):
                self.assertIsNone(parse_time_input(text))

    def test_parse_time_input_ascii_digits_only(self):
        from tracker.util.misc import parse_time_input
        for text in ("٣", "1:٠٠", "１２"):
            with self.subTest(text=text):
                self.assertIsNone(parse_time_input(text))

    def test_now_local_is_aware(self):
        from tracker.util.misc import now_local
        self.assertIsNotNone(now_local().tzinfo)


if __name__ == "__main__":
    unittest.main()
