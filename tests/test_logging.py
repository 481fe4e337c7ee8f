import io
import logging
import unittest
from contextlib import redirect_stdout

from wallet_intents.core.logging import LOG_FORMAT, setup_logging


class SetupLoggingTests(unittest.TestCase):
    def setUp(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        root.handlers = []

        def restore():
            root.handlers = saved_handlers
            root.setLevel(saved_level)

        self.addCleanup(restore)

    def test_default_stream_is_resolved_at_call_time(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            setup_logging("info")

        handler = logging.getLogger().handlers[0]
        self.assertIs(handler.stream, buf)
        self.assertEqual(handler.formatter._fmt, LOG_FORMAT)
        self.assertEqual(logging.getLogger().level, logging.INFO)

    def test_explicit_stream_and_level(self):
        buf = io.StringIO()
        setup_logging("debug", stream=buf)

        logging.getLogger("wallet_intents.test").debug("resolved transfer")

        self.assertIs(logging.getLogger().handlers[0].stream, buf)
        self.assertIn("DEBUG - resolved transfer", buf.getvalue())
        self.assertEqual(logging.getLogger("httpx").level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()
