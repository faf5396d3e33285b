"""logz: filter, summarize and follow line-oriented log files."""

import logging
import signal
import sys
import threading
from argparse import ArgumentParser

from logz.config import load_config, load_yaml_config
from logz.errors import ConfigError, LogzError
from logz.filters import build_filter_spec
from logz.formatter import MARKDOWN_HEADER, get_formatter
from logz.ingest import collect_records
from logz.stats import compute_stats, format_stats_json, format_stats_markdown
from logz.tail import TailFollower

logger = logging.getLogger("logz")


def _common_parser() -> ArgumentParser:
    """Options shared by every subcommand."""
    common = ArgumentParser(add_help=False)
    common.add_argument(
        "--date-format",
        help="Datetime format used at the beginning of the log line "
             "(default: %%Y-%%m-%%d %%H:%%M:%%S)",
    )
    common.add_argument(
        "--from-ts",
        help="Lower bound datetime filter (uses --date-format)",
    )
    common.add_argument(
        "--to-ts",
        help="Upper bound datetime filter (uses --date-format)",
    )
    common.add_argument(
        "--level",
        dest="levels",
        action="append",
        default=[],
        help="Log level to include (can be passed multiple times)",
    )
    common.add_argument(
        "--match",
        dest="substring_match",
        help="Substring to match (case-sensitive)",
    )
    common.add_argument(
        "--regex",
        help="Regular expression to match",
    )
    common.add_argument(
        "--config",
        help="Path to YAML config file",
    )
    common.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    return common


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    common = _common_parser()
    parser = ArgumentParser(
        prog="logz",
        description="Filter, summarize and follow log files.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", parents=[common], help="Print matching lines")
    analyze.add_argument(
        "--path",
        help="File or directory to read (default: a path read from stdin)",
    )
    analyze.add_argument(
        "--out",
        help="Output file to write filtered lines. If omitted, prints to stdout.",
    )
    analyze.add_argument(
        "--output",
        choices=["text", "json", "markdown"],
        default="text",
        help="Output format (default: text)",
    )

    stats = sub.add_parser("stats", parents=[common], help="Print statistics")
    stats.add_argument(
        "--path",
        help="File or directory to read (default: a path read from stdin)",
    )
    stats.add_argument(
        "-f", "--format",
        choices=["json", "markdown"],
        default="json",
        help="Output format for stats (default: json)",
    )

    tail = sub.add_parser("tail", parents=[common], help="Follow a growing file")
    tail.add_argument("--path", required=True, help="File to follow")
    tail.add_argument(
        "--interval",
        type=float,
        help="Polling interval in seconds (default: 0.5)",
    )
    tail.add_argument(
        "--from-start",
        action="store_true",
        help="Emit existing content before following",
    )
    return parser


def _read_path_from_stdin() -> str:
    print("Reading path from stdin (press Ctrl+D to end, or Ctrl+C to cancel)...",
          file=sys.stderr)
    path = sys.stdin.readline().strip()
    if not path:
        raise ConfigError("--path", "", "no path given on standard input")
    return path


def run_analyze(args) -> None:
    spec = build_filter_spec(args)
    path = args.path or _read_path_from_stdin()
    records = collect_records(path, spec, args.date_format)

    formatter = get_formatter(args.output)
    lines = [formatter(record) for record in records]
    if args.output == "markdown":
        lines.insert(0, MARKDOWN_HEADER)

    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")
        logger.info("Wrote %d record(s) to %s", len(records), args.out)
    else:
        for line in lines:
            print(line)


def run_stats(args) -> None:
    spec = build_filter_spec(args)
    path = args.path or _read_path_from_stdin()
    stats = compute_stats(collect_records(path, spec, args.date_format))
    if args.format == "markdown":
        print(format_stats_markdown(stats))
    else:
        print(format_stats_json(stats))


def run_tail(args, cfg) -> None:
    spec = build_filter_spec(args)
    interval = args.interval if args.interval is not None else cfg.poll_interval
    stop = threading.Event()

    def _shutdown(signum, frame):
        logger.info("Received signal %d, stopping", signum)
        stop.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    with TailFollower(
        args.path,
        interval=interval,
        from_start=args.from_start or cfg.from_start,
        spec=spec,
        date_format=args.date_format,
        stop_event=stop,
    ) as follower:
        for record in follower.follow():
            print(record.raw, flush=True)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = load_config(load_yaml_config(args.config))
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else cfg.log_level,
        format="%(asctime)s [LOGZ] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    args.date_format = args.date_format or cfg.date_format

    try:
        if args.command == "analyze":
            run_analyze(args)
        elif args.command == "stats":
            run_stats(args)
        else:
            run_tail(args, cfg)
    except LogzError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(0)
    except BrokenPipeError:
        sys.exit(0)
