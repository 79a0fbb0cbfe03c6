#!/usr/bin/env python3
"""
dupfinder CLI — Command line interface for duplicate file detection.
Implements the same core engine as the GUI but with console-based interaction.
The CLI only reports: it never moves or deletes files.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import json
import sys
import os
import threading
import time
from pathlib import Path
from typing import Iterable, NoReturn, Optional
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

from dupfinder.core.errors import DupfinderError, REARM_FAILED_PREFIX
from dupfinder.core.models import ScanParams, ScanResult
from dupfinder.core.watcher import FileWatcher
from dupfinder.commands import DuplicateScanCommand
from dupfinder.services.duplicate_service import DuplicateService
from dupfinder.utils.convert_utils import ConvertUtils
from dupfinder.aliases import OUTPUT_FORMATS, WATCH_HELP_TEXT, EPILOG_TEXT


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self.result: ScanResult = ScanResult()
        self._result_lock = threading.Lock()
        self._all_resolved = threading.Event()

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="dupfinder",
            description="dupfinder — finds byte-identical files and follows them while you clean up",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        # Required arguments
        parser.add_argument(
            "--input", "-i",
            required=True,
            type=str,
            help="Input directory to scan for duplicates"
        )

        parser.add_argument(
            "--no-follow-symlinks",
            action="store_false",
            dest="follow_symlinks",
            help="Do not hash the targets of file symlinks (directory symlinks are never followed)"
        )

        # Output options
        parser.add_argument(
            "--format", "-f",
            choices=OUTPUT_FORMATS,
            default="text",
            type=str,
            help="Report format. Default: text"
        )
        parser.add_argument(
            "--watch", "-w",
            action="store_true",
            help=WATCH_HELP_TEXT
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Stream the scan log (one line per hashed file)"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.quiet and args.verbose:
            self.error_exit("--quiet and --verbose cannot be used together")

        root_path = Path(args.input).resolve()
        if not root_path.exists():
            self.error_exit(f"Directory not found: {args.input}")
        if not root_path.is_dir():
            self.error_exit(f"Path is not a directory: {args.input}")

    def create_params(self, args: argparse.Namespace) -> ScanParams:
        """Create ScanParams from CLI arguments."""
        try:
            return ScanParams(
                root_dir=str(Path(args.input).resolve()),
                follow_file_symlinks=args.follow_symlinks,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def log_line(self, line: str) -> None:
        """CLI log sink - mirrors the scan log to stderr in verbose mode."""
        if not self.verbose:
            return
        sys.stderr.write(line.rstrip("\r\n") + "\n")
        sys.stderr.flush()

    def run_scan(self, params: ScanParams) -> ScanResult:
        """Execute the scan workflow."""
        command = DuplicateScanCommand()
        try:
            return command.execute(params, log_sink=self.log_line)
        except DupfinderError as e:
            self.error_exit(f"Scan failed: {e}")

    def output_results(self, result: ScanResult, output_format: str = "text") -> None:
        """Output duplicate classes in discovery order."""
        if output_format == "json":
            print(json.dumps(result.as_dict(), indent=2))
            return

        if self.quiet:
            return

        if not result:
            print("No duplicate files found.")
            return

        print(f"\nFound {len(result)} duplicate groups ({result.duplicate_count} files)")
        for dup in result:
            print(f"\nDuplicate files (Hash: {dup.digest}):")
            for path in dup.paths:
                print(f"   {path}")

        print(f"\nTotal space taken by extra copies: {ConvertUtils.bytes_to_human(result.wasted_bytes())}")

    def forget_paths(self, paths: Iterable[str]) -> int:
        """Drops paths from the result. Returns the number of groups left."""
        with self._result_lock:
            self.result = DuplicateService.remove_paths(self.result, paths)
            return len(self.result)

    def on_file_gone(self, path: str) -> None:
        """Disappearance callback - runs on the watcher thread."""
        remaining = self.forget_paths([path])

        if not self.quiet:
            print(f"Gone: {path} ({remaining} duplicate groups left)", flush=True)

        if remaining == 0:
            self._all_resolved.set()

    def on_watcher_log(self, line: str) -> None:
        """
        Watcher log sink - runs on the watcher thread.
        Files under a torn-down directory watch are dropped from the result.
        """
        self.warning(line)
        if not line.startswith(REARM_FAILED_PREFIX):
            return

        rest = line[len(REARM_FAILED_PREFIX):]
        with self._result_lock:
            directories = {os.path.dirname(p) for p in self.result.paths()}
            matching = [d for d in directories if rest.startswith(f"{d}: ")]
            if not matching:
                return
            directory = max(matching, key=len)
            lost = [p for p in self.result.paths() if os.path.dirname(p) == directory]

        if self.forget_paths(lost) == 0:
            self._all_resolved.set()

    def watch_results(self, watcher: Optional[FileWatcher] = None) -> None:
        """Follow reported files until every group is resolved or the user interrupts."""
        if not self.result:
            return

        watcher = watcher or FileWatcher(log_sink=self.on_watcher_log)
        watcher.set_callback(self.on_file_gone)
        with watcher:
            registered, skipped = DuplicateScanCommand.watch(self.result, watcher)
            if skipped and self.forget_paths(skipped) == 0:
                self._all_resolved.set()
            if not self.quiet:
                print(f"\nWatching {registered} files. Press Ctrl+C to stop.", flush=True)

            # Short waits keep Ctrl+C responsive on every platform
            while not self._all_resolved.wait(0.5):
                pass

        if not self.quiet:
            print("No duplicate groups left.")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message.rstrip()}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv=None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet

        self.validate_args(args)
        params = self.create_params(args)

        if not self.quiet and args.format == "text":
            print(f"Scanning directory: {params.root_dir}")

        self.result = self.run_scan(params)
        self.output_results(self.result, args.format)

        if args.watch:
            self.watch_results()

        elapsed = time.time() - self.start_time
        if self.verbose and args.format == "text":
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
