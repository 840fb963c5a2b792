from __future__ import annotations

import io
import json
import os
import subprocess
import sys
import tempfile
import threading
import unittest
from pathlib import Path
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from paint_core import app, events  # noqa: E402
from paint_core.config import resolve_config  # noqa: E402
from paint_core.events import EventBus  # noqa: E402
from paint_core.installer import PackageInstaller, build_command  # noqa: E402
from paint_core.models import MissingModulePrompt  # noqa: E402

EVENT_LINES = [
    {"event": "server-start", "startTimeMs": 42, "hostname": "localhost", "port": 8080, "protocol": "http:", "ips": []},
    {"event": "worker-start", "id": "tsc"},
    {"event": "worker-message", "id": "tsc", "msg": "Found 0 errors.\n"},
    {"event": "worker-message", "id": "lint", "msg": "2 warnings\n"},
    {"event": "worker-complete", "id": "lint", "error": "lint failed"},
    {"event": "console-log", "level": "info", "args": ["hello %s", "world"]},
]


class CleanEnvTestCase(unittest.TestCase):
    def setUp(self):
        env = mock.patch.dict(os.environ)
        env.start()
        self.addCleanup(env.stop)
        for key in ("FORCE_COLOR", "TTY_INTERACTIVE", "TTY_COMPATIBLE", "DEVPAINT_CONFIG", "DEVPAINT_PORT"):
            os.environ.pop(key, None)

    def write_events(self, tmp: str, records, extra_lines=()) -> str:
        path = Path(tmp) / "events.jsonl"
        lines = [json.dumps(record) for record in records] + list(extra_lines)
        path.write_text("\n".join(lines) + "\n")
        return str(path)


class ParseEventTests(unittest.TestCase):
    def test_parses_name_and_payload(self):
        event = app.parse_event('{"event": "worker-reset", "id": "tsc"}\n')
        self.assertEqual((event.name, event.payload), ("worker-reset", {"id": "tsc"}))

    def test_blank_line_is_skipped_silently(self):
        self.assertIsNone(app.parse_event("   \n"))

    def test_bad_lines_are_logged_and_skipped(self):
        with self.assertLogs("paint_core.app", level="WARNING") as logs:
            self.assertIsNone(app.parse_event("{oops"))
            self.assertIsNone(app.parse_event('{"id": "tsc"}'))
        self.assertEqual(len(logs.output), 2)


class SnapshotTests(CleanEnvTestCase):
    def test_json_snapshot_reflects_events(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = self.write_events(tmp, EVENT_LINES, extra_lines=["not json"])
            with mock.patch("sys.stdout", new_callable=io.StringIO) as stdout, \
                    mock.patch("sys.stderr", new_callable=io.StringIO):
                code = app.main(["--events", path, "--json", "--script", "lint", "--script", "tsc"])
        self.assertEqual(code, 0)
        snapshot = json.loads(stdout.getvalue())
        self.assertTrue(snapshot["started"])
        self.assertEqual(list(snapshot["workers"]), ["lint", "tsc"])
        self.assertEqual(snapshot["workers"]["lint"]["error"], "lint failed")
        self.assertEqual(snapshot["workers"]["tsc"]["phase"], ["RUNNING", "yellow"])
        self.assertEqual(snapshot["consoleOutput"], "[info] hello world\n")

    def test_default_mode_prints_one_frame(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = self.write_events(tmp, EVENT_LINES)
            with mock.patch("sys.stdout", new_callable=io.StringIO) as stdout:
                code = app.main(["--events", path, "--program-name", "Devserver"])
        self.assertEqual(code, 0)
        out = stdout.getvalue()
        self.assertEqual(out.count("\x1b[2J"), 1)
        self.assertIn("▼ Console", out)
        self.assertIn("▼ tsc\n\nFound 0 errors.", out)
        self.assertIn("Devserver\n\n  http://localhost:8080\n  Server started in 42ms.", out)

    def test_install_complete_is_cleared_before_snapshot(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg = Path(tmp) / "cfg.json"
            cfg.write_text(json.dumps({"install_hold_seconds": 0.01}))
            path = self.write_events(
                tmp,
                [
                    {"event": "install-start"},
                    {"event": "console-log", "level": "info", "args": ["resolving"]},
                    {"event": "install-complete"},
                ],
            )
            with mock.patch("sys.stdout", new_callable=io.StringIO) as stdout:
                code = app.main(["--events", path, "--json", "--config", str(cfg)])
        self.assertEqual(code, 0)
        snapshot = json.loads(stdout.getvalue())
        self.assertFalse(snapshot["isInstalling"])
        self.assertEqual(snapshot["installOutput"], "")

    def test_bad_config_is_a_usage_error(self):
        with mock.patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit) as ctx:
                app.main(["--config", "/nonexistent/devpaint.json"])
        self.assertEqual(ctx.exception.code, 2)


class LiveModeTests(CleanEnvTestCase):
    def test_live_repaints_per_event_and_stops_at_end_of_stream(self):
        stream = io.StringIO()
        settings = resolve_config()
        dashboard = app.Dashboard(settings, stream, styled=False)
        lines = [json.dumps(record) for record in EVENT_LINES]
        dashboard.run_live(lines)
        # initial paint plus one per event
        self.assertEqual(dashboard.painter.frames, len(EVENT_LINES) + 1)
        self.assertIn("▼ lint", stream.getvalue())

    def test_confirm_key_triggers_add_package(self):
        settings = resolve_config(overrides={"add_package_command": ["true", "{pkg}"]})
        dashboard = app.Dashboard(settings, io.StringIO(), styled=False)
        dashboard.state.missing_module = MissingModulePrompt("src/a.js", "react", "react")
        with mock.patch.object(dashboard.controller, "add_package") as add_package:
            self.assertTrue(dashboard.controller.handle_key("\r"))
        add_package.assert_called_once_with("react")


class InstallerTests(unittest.TestCase):
    def test_build_command_substitutes_package(self):
        self.assertEqual(build_command(["npm", "install", "{pkg}"], "react"), ["npm", "install", "react"])

    def test_run_reports_progress_on_bus(self):
        bus = EventBus()
        seen = []
        for name in (events.INSTALL_START, events.CONSOLE_LOG, events.INSTALL_COMPLETE):
            bus.on(name, lambda payload, name=name: seen.append((name, payload)))
        installer = PackageInstaller(bus, ["npm", "install", "{pkg}"])
        proc = mock.MagicMock(stdout=io.StringIO("added react\n"))
        proc.wait.return_value = 0
        with mock.patch("paint_core.installer.subprocess.Popen", return_value=proc) as popen:
            self.assertEqual(installer.run("react"), 0)
        popen.assert_called_once()
        self.assertEqual(popen.call_args.args[0], ["npm", "install", "react"])
        self.assertIs(popen.call_args.kwargs["stderr"], subprocess.STDOUT)
        bus.process_pending()
        self.assertEqual(
            seen,
            [
                (events.INSTALL_START, {}),
                (events.CONSOLE_LOG, {"level": "info", "args": ["added react\n"]}),
                (events.INSTALL_COMPLETE, {}),
            ],
        )

    def test_output_lines_reach_the_bus_as_they_are_read(self):
        bus = EventBus()
        seen = []
        bus.on(events.CONSOLE_LOG, lambda payload: seen.append(payload["args"][0]))
        seen_before_second_line = []

        def output():
            yield "resolving react\n"
            bus.process_pending()
            seen_before_second_line.extend(seen)
            yield "npm WARN deprecated\n"
            yield "added react\n"

        proc = mock.MagicMock()
        proc.stdout.__enter__.return_value = proc.stdout
        proc.stdout.__iter__.return_value = output()
        proc.wait.return_value = 0
        installer = PackageInstaller(bus, ["npm", "install", "{pkg}"])
        with mock.patch("paint_core.installer.subprocess.Popen", return_value=proc):
            installer.run("react")
        bus.process_pending()
        self.assertEqual(seen_before_second_line, ["resolving react\n"])
        self.assertEqual(seen, ["resolving react\n", "npm WARN deprecated\n", "added react\n"])

    def test_hung_command_is_killed_after_timeout(self):
        bus = EventBus()
        logs = []
        bus.on(events.CONSOLE_LOG, logs.append)
        killed = threading.Event()

        def output():
            killed.wait(5)
            yield from ()

        proc = mock.MagicMock()
        proc.stdout.__enter__.return_value = proc.stdout
        proc.stdout.__iter__.return_value = output()
        proc.kill.side_effect = killed.set
        proc.wait.return_value = -9
        installer = PackageInstaller(bus, ["npm", "install", "{pkg}"], timeout=0.01)
        with mock.patch("paint_core.installer.subprocess.Popen", return_value=proc):
            self.assertEqual(installer.run("react"), 124)
        proc.kill.assert_called_once()
        bus.process_pending()
        self.assertIn("timed out", logs[-1]["args"][0])

    def test_missing_command_is_reported(self):
        bus = EventBus()
        logs = []
        bus.on(events.CONSOLE_LOG, logs.append)
        installer = PackageInstaller(bus, ["definitely-not-a-package-manager", "{pkg}"])
        with mock.patch("paint_core.installer.subprocess.Popen", side_effect=FileNotFoundError):
            self.assertEqual(installer.run("react"), 127)
        bus.process_pending()
        self.assertIn("command not found", logs[0]["args"][0])


if __name__ == "__main__":
    unittest.main()
