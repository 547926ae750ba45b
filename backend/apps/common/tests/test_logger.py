import logging
import unittest

from apps.common.logger import AppLogger, REDACTED, get_logger, render


class RenderTests(unittest.TestCase):
    def test_plain_message_without_context(self):
        self.assertEqual(render("hello", {}), "hello")

    def test_context_rendered_as_key_value_pairs(self):
        text = render("Dish fetched", {"dish_id": 7, "ok": True, "ids": [1, 2]})
        self.assertEqual(text, "Dish fetched | dish_id=7 ok=True ids=[1, 2]")

    def test_tokens_are_redacted(self):
        text = render("Session authenticated", {"token": "abc.def", "Authorization": "Bearer x"})
        self.assertNotIn("abc.def", text)
        self.assertIn(f"token={REDACTED}", text)
        self.assertIn(f"Authorization={REDACTED}", text)

    def test_empty_token_is_not_masked(self):
        self.assertIn("token=None", render("x", {"token": None}))


class AppLoggerTests(unittest.TestCase):
    def test_bind_merges_context_without_mutating_parent(self):
        parent = get_logger("apps.tests").bind(component="carts")
        child = parent.bind(layer="service")
        self.assertEqual(parent.context, {"component": "carts"})
        self.assertEqual(child.context, {"component": "carts", "layer": "service"})

    def test_messages_reach_stdlib_logger(self):
        log = AppLogger("apps.tests.logger").bind(component="guest")
        with self.assertLogs("apps.tests.logger", level="INFO") as captured:
            log.info("Guest cart cleared", lines=0)
        self.assertEqual(captured.records[0].levelno, logging.INFO)
        self.assertIn("Guest cart cleared | component=guest lines=0", captured.output[0])

    def test_exception_attaches_traceback(self):
        log = AppLogger("apps.tests.logger")
        with self.assertLogs("apps.tests.logger", level="ERROR") as captured:
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                log.exception("Failed")
        self.assertIsNotNone(captured.records[0].exc_info)
