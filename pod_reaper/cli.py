import argparse
import sys

from pod_reaper.client import PodStore
from pod_reaper.config import load_config
from pod_reaper.errors import ReaperError
from pod_reaper.loader import load_rules
from pod_reaper.logs import configure_logging, get_logger
from pod_reaper.model import load_json
from pod_reaper.options import load_options
from pod_reaper.output import build_result, output_result
from pod_reaper.reaper import Reaper

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pod-reaper",
        description="Periodically terminate Kubernetes pods matching configured rules",
    )
    parser.add_argument(
        "--config",
        help="YAML file of settings; environment variables take precedence",
    )

    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser("run", help="Reap pods on the configured schedule")
    run.add_argument(
        "--once",
        action="store_true",
        help="Run a single reap cycle and exit",
    )

    check = subparsers.add_parser(
        "check", help="Evaluate the configured rules against a pod JSON file"
    )
    check.add_argument("--pod", required=True, help="Path to Pod JSON")
    check.add_argument(
        "--format",
        choices=["text", "json", "yaml"],
        default="text",
        help="Output format (text, json, yaml)",
    )
    return parser


def run(config, once: bool = False) -> None:
    options = load_options(config)
    reaper = Reaper(PodStore(), options)
    if once:
        count = reaper.reap_cycle()
        logger.info("cycle complete, %d pod(s) reaped", count)
        return
    reaper.harvest()


def check(config, pod_path: str, fmt: str) -> None:
    rules = load_rules(config)
    pod = load_json(pod_path)
    output_result(build_result(pod, rules, rules.should_reap(pod)), fmt)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        configure_logging(
            config.get("LOG_LEVEL", "info"), config.get("LOG_FORMAT", "text")
        )
    except (ReaperError, ValueError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    try:
        if args.command == "check":
            check(config, args.pod, args.format)
        else:
            run(config, once=getattr(args, "once", False))
    except ReaperError as exc:
        logger.critical("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
