"""Tests for the display helpers that don't need a running QApplication.

Covers: tracker.ui.widgets, tracker.ui.dialogs.edit_timer
"""

import unittest


class TestRowHelpers(unittest.TestCase):

    def test_row_state_and_glyph(self):
        from tracker.core.timer import Timer
        from tracker.ui.theme import GLYPHS
        from tracker.ui.widgets import play_glyph, row_state

        t = Timer()
        self.assertEqual((row_state(t), play_glyph(t)), ("paused", GLYPHS["play"]))
        t.start(0.0)
        self.assertEqual((row_state(t), play_glyph(t)), ("running", GLYPHS["pause"]))
        t.pause(1.0, auto=True)
        self.assertEqual((row_state(t), play_glyph(t)), ("auto_paused", GLYPHS["auto_paused"]))

    def test_stylesheet_mentions_every_state(self):
        from tracker.ui.theme import build_stylesheet
        css = build_stylesheet()
        for state in ("running", "paused", "auto_paused"):
            self.assertIn(f'[state="{state}"]', css)


class TestWorkspaceCycling(unittest.TestCase):

    def test_cycle_through_all_workspaces(self):
        from tracker.ui.dialogs.edit_timer import next_workspace
        seen = [None]
        for _ in range(4):
            seen.append(next_workspace(seen[-1], 3))
        self.assertEqual(seen, [None, 0, 1, 2, None])

    def test_single_workspace(self):
        from tracker.ui.dialogs.edit_timer import next_workspace
        self.assertEqual(next_workspace(None, 1), 0)
        self.assertIsNone(next_workspace(0, 1))
        self.assertEqual(next_workspace(None, 0), 0)

    def test_stale_binding_wraps_to_none(self):
        from tracker.ui.dialogs.edit_timer import next_workspace
        self.assertIsNone(next_workspace(7, 3))

    def test_labels(self):
        from tracker.ui.dialogs.edit_timer import workspace_label
        self.assertEqual(workspace_label(None), "No WS")
        self.assertEqual(workspace_label(2), "WS 2")


if __name__ == "__main__":
    unittest.main()
