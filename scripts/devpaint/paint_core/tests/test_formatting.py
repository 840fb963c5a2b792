from __future__ import annotations

import os
import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from paint_core.formatting import (  # noqa: E402
    elapsed_message,
    format_args,
    indent_block,
    relative_path,
    server_url,
)


class FormatArgsTests(unittest.TestCase):
    def test_plain_strings_join_with_spaces(self):
        self.assertEqual(format_args(["built", "3 files"]), "built 3 files")

    def test_placeholders_consume_arguments(self):
        self.assertEqual(format_args(["%s took %dms", "tsc", 41.7]), "tsc took 41ms")
        self.assertEqual(format_args(["%f%%", 12.5]), "12.5%")
        self.assertEqual(format_args(["%j", {"ok": True}]), '{"ok": true}')

    def test_unmatched_placeholder_is_left_alone(self):
        self.assertEqual(format_args(["%s and %s", "one"]), "one and %s")

    def test_css_placeholder_swallows_argument(self):
        self.assertEqual(format_args(["%cstyled", "color: red"]), "styled")

    def test_non_string_first_argument(self):
        self.assertEqual(format_args([1, None, [1, 2], False]), "1 null [1, 2] false")

    def test_no_arguments(self):
        self.assertEqual(format_args([]), "")

    def test_infinite_numbers_do_not_raise(self):
        self.assertEqual(format_args(["took %d ms", float("inf")]), "took Infinity ms")
        self.assertEqual(format_args(["%i", float("-inf")]), "-Infinity")
        self.assertEqual(format_args(["%f", "nope"]), "NaN")


class TextHelperTests(unittest.TestCase):
    def test_indent_block_trims_and_indents(self):
        self.assertEqual(indent_block("\n first\nsecond\n\n"), "first\n  second")

    def test_server_url_accepts_both_protocol_spellings(self):
        self.assertEqual(server_url("http:", "localhost", 8080), "http://localhost:8080")
        self.assertEqual(server_url("https", "10.0.0.2", 443), "https://10.0.0.2:443")

    def test_elapsed_message(self):
        self.assertEqual(elapsed_message(42), "Server started in 42ms.")
        self.assertEqual(elapsed_message(999), "Server started in 999ms.")
        self.assertEqual(elapsed_message(1000), "Server started.")

    def test_elapsed_message_keeps_fractional_precision(self):
        self.assertEqual(elapsed_message(123.456789), "Server started in 123.456789ms.")
        self.assertEqual(elapsed_message(999.9999999), "Server started in 999.9999999ms.")
        self.assertEqual(elapsed_message(12.0), "Server started in 12ms.")

    def test_relative_path(self):
        cwd = os.path.abspath(os.sep + "project")
        self.assertEqual(relative_path(os.path.join(cwd, "src", "a.js"), cwd), os.path.join("src", "a.js"))


if __name__ == "__main__":
    unittest.main()
