OUTPUT_FORMATS = ["text", "json"]

WATCH_HELP_TEXT = (
    "Keep running after the report and watch every reported file.\n"
    "Prints 'Gone: <path>' when a duplicate disappears and exits\n"
    "once no duplicate groups are left (or on Ctrl+C).\n"
    "Example    : %(prog)s -i ~/Downloads --watch\n"
)

EPILOG_TEXT = """
Examples:
  Basic usage - find duplicates in Downloads folder
  %(prog)s -i ~/Downloads

  Show every hashed file while scanning
  %(prog)s -i ~/Downloads --verbose

  Machine-readable output (digest -> paths) for scripts
  %(prog)s -i ~/Downloads --format json > ~/Downloads/report.json

  Report, then follow the groups while you clean them up in a file manager
  %(prog)s -i ~/Downloads --watch
"""
