import logging
import sys
from pathlib import Path

USAGE = """usage:
  meetgrid [--debug] [FRAGMENT_OR_URL]       launch the planner
  meetgrid ranges FRAGMENT_OR_URL           print each user's ranges and the common ranges
  meetgrid export FRAGMENT_OR_URL OUT.ics   write the common ranges as iCal"""


def _decode_or_exit(text: str):
    from meetgrid.codec import decode_state

    result = decode_state(text)
    for token in result.skipped:
        print(f"warning: skipped {token}", file=sys.stderr)
    if not result.ok:
        print("No shared state found in the given fragment.", file=sys.stderr)
        sys.exit(1)
    return result.state


def run_ranges(text: str):
    """Print every user's ranges followed by the common ranges."""
    from meetgrid.ranges import common_ranges, ranges_to_text, user_ranges

    state = _decode_or_exit(text)
    for user in state.users:
        marker = " (active)" if user.id == state.active_user_id else ""
        print(f"{user.name}{marker}")
        print("=" * 40)
        print(ranges_to_text(user_ranges(user.selections)) or "(none)")
        print()
    print("Common")
    print("=" * 40)
    print(ranges_to_text(common_ranges(state.users)) or "(none)")


def run_export(text: str, output: str):
    from meetgrid.export import export_ical
    from meetgrid.ranges import common_ranges

    state = _decode_or_exit(text)
    ranges = common_ranges(state.users)
    export_ical(ranges, Path(output))
    print(f"Exported {len(ranges)} range{'s' if len(ranges) != 1 else ''} to {output}")


def run_app(fragment: str | None = None):
    """Launch the TUI application."""
    from meetgrid.app import MeetGridApp
    app = MeetGridApp(fragment=fragment)
    app.run()


def main(argv: list[str] | None = None):
    args = list(sys.argv[1:] if argv is None else argv)
    if "--debug" in args:
        args.remove("--debug")
        logging.basicConfig(level=logging.DEBUG)

    if args and args[0] in ("-h", "--help"):
        print(USAGE)
    elif args and args[0] == "ranges" and len(args) == 2:
        run_ranges(args[1])
    elif args and args[0] == "export" and len(args) == 3:
        run_export(args[1], args[2])
    elif len(args) <= 1 and not (args and args[0] in ("ranges", "export")):
        run_app(args[0] if args else None)
    else:
        print(USAGE, file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
