import logging
import unittest

from kampfgericht.services import NotificationCenter, NotificationLevel


class NotificationCenterTests(unittest.TestCase):
    def test_drain_empties_buffer(self) -> None:
        center = NotificationCenter()
        center.success("Game saved", "Final score: Falcons 2 : 0 Otters")
        center.error("Error saving the game")

        self.assertEqual(len(center.peek()), 2)
        items = center.drain()
        self.assertEqual([n.level for n in items], [NotificationLevel.SUCCESS, NotificationLevel.ERROR])
        self.assertEqual(items[0].to_dict()["detail"], "Final score: Falcons 2 : 0 Otters")
        self.assertEqual(center.drain(), [])

    def test_buffer_is_bounded(self) -> None:
        center = NotificationCenter(max_buffered=3)
        for i in range(5):
            center.info(f"n{i}")
        self.assertEqual([n.title for n in center.drain()], ["n2", "n3", "n4"])

    def test_errors_are_logged_as_warnings(self) -> None:
        center = NotificationCenter()
        with self.assertLogs("kampfgericht.services.notifications", level=logging.INFO) as logs:
            center.notify("error", "Scoring not allowed", "Halftime break")
        self.assertIn("WARNING", logs.output[0])
        self.assertIn("Halftime break", logs.output[0])


if __name__ == "__main__":
    unittest.main()
