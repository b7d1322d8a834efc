import asyncio
import unittest

from tests.support import ManualScheduler

from catalog_admin.client.debounce import DebouncedValue


class DebouncedValueTests(unittest.TestCase):
    def setUp(self):
        self.scheduler = ManualScheduler()
        self.emitted = []
        self.value = DebouncedValue("", self.emitted.append, delay=0.3, scheduler=self.scheduler)

    def test_rapid_edits_emit_once_with_final_value(self):
        for text in ("l", "la", "lam", "lamp"):
            self.value.edit(text)
            self.scheduler.advance(0.1)
        self.assertEqual(self.emitted, [])
        self.assertEqual(self.value.value, "lamp")
        self.scheduler.advance(0.3)
        self.assertEqual(self.emitted, ["lamp"])
        self.assertFalse(self.value.pending)

    def test_edit_at_delay_boundary_still_coalesces(self):
        self.value.edit("a")
        self.scheduler.now += 0.3
        # The edit lands before the due timer is run.
        self.value.edit("ab")
        self.scheduler.advance(0)
        self.assertEqual(self.emitted, [])
        self.scheduler.advance(0.3)
        self.assertEqual(self.emitted, ["ab"])

    def test_no_emit_when_value_returns_to_last_emitted(self):
        self.value.edit("x")
        self.value.edit("")
        self.scheduler.advance(1)
        self.assertEqual(self.emitted, [])

    def test_echo_does_not_reset_newer_local_value(self):
        self.value.edit("lamp")
        self.scheduler.advance(0.3)
        self.value.edit("lamps")
        self.value.sync("lamp")
        self.assertEqual(self.value.value, "lamps")
        self.assertTrue(self.value.pending)
        self.scheduler.advance(0.3)
        self.assertEqual(self.emitted, ["lamp", "lamps"])

    def test_external_change_resyncs_local_value(self):
        self.value.edit("lamp")
        self.scheduler.advance(0.3)
        self.value.edit("lam")
        self.value.sync("chair")
        self.assertEqual(self.value.value, "chair")
        self.assertEqual(self.value.last_emitted, "chair")
        self.assertFalse(self.value.pending)
        self.scheduler.advance(1)
        self.assertEqual(self.emitted, ["lamp"])

    def test_flush_and_cancel(self):
        self.value.edit("now")
        self.value.flush()
        self.assertEqual(self.emitted, ["now"])
        self.value.edit("never")
        self.value.cancel()
        self.scheduler.advance(1)
        self.assertEqual(self.emitted, ["now"])
        self.assertEqual(self.value.value, "never")


class DebouncedValueLoopTests(unittest.IsolatedAsyncioTestCase):
    async def test_uses_running_loop_by_default(self):
        emitted = []
        value = DebouncedValue("", emitted.append, delay=0.01)
        value.edit("a")
        value.edit("ab")
        await asyncio.sleep(0.05)
        self.assertEqual(emitted, ["ab"])


if __name__ == "__main__":
    unittest.main()
