"""
CLI tests — argument validation, report formats and the watch loop.
"""
import json
import sys
import threading
from unittest import mock
import pytest
from dupfinder import cli
from dupfinder.cli import CLIApplication
from dupfinder.core.errors import NotARegularFile
from dupfinder.core.deduplicator import DeduplicatorImpl
from dupfinder.core.models import ScanParams, ScanResult
from conftest import sha256_hex


class StubWatcher:
    """Stands in for FileWatcher: reports `gone` once `expected` paths were offered."""

    def __init__(self, expected, gone, unwatchable=()):
        self.expected = expected
        self.gone = gone
        self.unwatchable = set(unwatchable)
        self.added = []
        self.callback = None
        self.started = False
        self.stopped = False

    def set_callback(self, callback):
        self.callback = callback

    def add_file(self, path):
        self.added.append(path)
        if len(self.added) == self.expected:
            for gone in self.gone:
                self.callback(gone)
        if path in self.unwatchable:
            raise NotARegularFile(path)

    def __enter__(self):
        self.started = True
        return self

    def __exit__(self, *exc):
        self.stopped = True


def make_duplicates(root):
    (root / "a").mkdir()
    (root / "a" / "x").write_bytes(b"A")
    (root / "a" / "y").write_bytes(b"A")
    (root / "a" / "z").write_bytes(b"B")


class TestArguments:

    def test_missing_directory_exits(self, temp_dir, capsys):
        with mock.patch.object(sys, 'argv', ['dupfinder', '--input', str(temp_dir / "nope")]):
            with pytest.raises(SystemExit) as exc_info:
                CLIApplication().run()

        assert exc_info.value.code == 1
        assert "Directory not found" in capsys.readouterr().err

    def test_file_as_input_exits(self, temp_dir, capsys):
        target = temp_dir / "file.txt"
        target.write_bytes(b"x")

        with pytest.raises(SystemExit):
            CLIApplication().run(['--input', str(target)])

        assert "not a directory" in capsys.readouterr().err

    def test_quiet_and_verbose_conflict(self, temp_dir):
        with pytest.raises(SystemExit):
            CLIApplication().run(['--input', str(temp_dir), '--quiet', '--verbose'])

    def test_input_is_required(self):
        with pytest.raises(SystemExit) as exc_info:
            CLIApplication.parse_args([])
        assert exc_info.value.code == 2

    def test_defaults(self, temp_dir):
        args = CLIApplication.parse_args(['-i', str(temp_dir)])

        assert args.format == "text"
        assert args.follow_symlinks is True
        assert args.watch is False

    def test_no_follow_symlinks_reaches_params(self, temp_dir):
        app = CLIApplication()
        args = app.parse_args(['-i', str(temp_dir), '--no-follow-symlinks'])

        params = app.create_params(args)

        assert params.follow_file_symlinks is False
        assert params.root_dir == str(temp_dir.resolve())


class TestReport:

    def test_text_report_lists_each_class(self, temp_dir, capsys):
        make_duplicates(temp_dir)

        CLIApplication().run(['--input', str(temp_dir)])

        out = capsys.readouterr().out
        assert f"Duplicate files (Hash: {sha256_hex(b'A')}):" in out
        assert str(temp_dir / "a" / "x") in out
        assert str(temp_dir / "a" / "y") in out
        assert str(temp_dir / "a" / "z") not in out
        assert "Total space taken by extra copies: 1.00B" in out

    def test_json_report_is_digest_mapping(self, temp_dir, capsys):
        make_duplicates(temp_dir)

        CLIApplication().run(['--input', str(temp_dir), '--format', 'json'])

        report = json.loads(capsys.readouterr().out)
        assert report == {sha256_hex(b"A"): [str(temp_dir / "a" / "x"), str(temp_dir / "a" / "y")]}

    def test_no_duplicates_message(self, temp_dir, capsys):
        (temp_dir / "only").write_bytes(b"unique")

        CLIApplication().run(['--input', str(temp_dir)])

        assert "No duplicate files found." in capsys.readouterr().out

    def test_quiet_prints_nothing(self, temp_dir, capsys):
        make_duplicates(temp_dir)

        CLIApplication().run(['--input', str(temp_dir), '--quiet'])

        assert capsys.readouterr().out == ""

    def test_verbose_streams_scan_log_to_stderr(self, temp_dir, capsys):
        make_duplicates(temp_dir)

        CLIApplication().run(['--input', str(temp_dir), '--verbose'])

        err = capsys.readouterr().err
        assert f"Hashing completed: {temp_dir / 'a' / 'x'}\n" in err
        assert "\r" not in err


class TestWatch:

    def test_on_file_gone_updates_result(self, capsys):
        app = CLIApplication()
        app.result = ScanResult.from_mapping({"1" * 64: ["/a", "/b", "/c"]})

        app.on_file_gone("/a")

        assert app.result.as_dict() == {"1" * 64: ["/b", "/c"]}
        assert "Gone: /a (1 duplicate groups left)" in capsys.readouterr().out

    def test_watch_returns_when_every_group_resolved(self, capsys):
        app = CLIApplication()
        app.result = ScanResult.from_mapping({"1" * 64: ["/a", "/b"], "2" * 64: ["/c", "/d"]})
        watcher = StubWatcher(expected=4, gone=["/a", "/d"])

        app.watch_results(watcher)

        assert watcher.added == ["/a", "/b", "/c", "/d"]
        assert watcher.started and watcher.stopped
        assert len(app.result) == 0
        assert "No duplicate groups left." in capsys.readouterr().out

    def test_unwatchable_paths_are_dropped_before_waiting(self, capsys):
        app = CLIApplication()
        app.result = ScanResult.from_mapping({"1" * 64: ["/a", "/b"], "2" * 64: ["/c", "/d"]})
        watcher = StubWatcher(expected=4, gone=["/c"], unwatchable=["/b"])

        app.watch_results(watcher)

        assert len(app.result) == 0
        assert "No duplicate groups left." in capsys.readouterr().out

    def test_file_deleted_before_watching_does_not_block(self, temp_dir):
        """A group whose member vanished before registration cannot resolve by waiting."""
        (temp_dir / "a").write_bytes(b"same")
        (temp_dir / "b").write_bytes(b"same")
        app = CLIApplication()
        app.quiet = True
        app.result = DeduplicatorImpl().find_duplicates(ScanParams(str(temp_dir)))
        (temp_dir / "b").unlink()

        thread = threading.Thread(target=app.watch_results, daemon=True)
        thread.start()
        thread.join(timeout=5)

        assert not thread.is_alive()
        assert len(app.result) == 0

    def test_rearm_failure_drops_that_directory(self, capsys):
        app = CLIApplication()
        app.result = ScanResult.from_mapping({
            "1" * 64: ["/data/d1/a", "/data/d2/b"],
            "2" * 64: ["/data/d1/c", "/data/d2/d", "/data/d2/e"],
        })

        app.on_watcher_log("Watch re-arm failed for /data/d1: change notification stopped\r\n")

        assert app.result.as_dict() == {"2" * 64: ["/data/d2/d", "/data/d2/e"]}
        assert "Watch re-arm failed for /data/d1" in capsys.readouterr().err

    def test_rearm_failure_of_last_directory_resolves_watch(self):
        app = CLIApplication()
        app.quiet = True
        app.result = ScanResult.from_mapping({"1" * 64: ["/data/d1/a", "/data/d1/b"]})

        app.on_watcher_log("Watch re-arm failed for /data/d1: directory no longer exists\r\n")

        assert len(app.result) == 0
        assert app._all_resolved.is_set()

    def test_other_watcher_lines_keep_result(self):
        app = CLIApplication()
        app.quiet = True
        app.result = ScanResult.from_mapping({"1" * 64: ["/data/d1/a", "/data/d1/b"]})

        app.on_watcher_log("Watch re-arm failed for /elsewhere: directory no longer exists\r\n")
        app.on_watcher_log("something else\r\n")

        assert len(app.result) == 1
        assert not app._all_resolved.is_set()

    def test_watch_skipped_for_empty_result(self):
        app = CLIApplication()
        watcher = StubWatcher(expected=0, gone=[])

        app.watch_results(watcher)

        assert not watcher.started


class TestMain:

    def test_ctrl_c_exits_with_130(self):
        with mock.patch.object(CLIApplication, 'run', side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                cli.main()

        assert exc_info.value.code == 130

    def test_unexpected_error_exits_with_1(self, monkeypatch, capsys):
        monkeypatch.delenv("DEBUG", raising=False)
        with mock.patch.object(CLIApplication, 'run', side_effect=RuntimeError("boom")):
            with pytest.raises(SystemExit) as exc_info:
                cli.main()

        assert exc_info.value.code == 1
        assert "boom" in capsys.readouterr().err
