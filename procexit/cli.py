"""
procexit command line.

Usage:
    procexit demo --workers 4 --unit-secs 0.5
    procexit demo --fail "database unreachable"
    procexit -c etc/procexit.yaml config --format json
    procexit version
"""

import argparse
import json
import os
import sys
import time
from typing import Any

import yaml  # type: ignore[import-untyped]

from .config import Config
from .exceptions import ConfigError
from .lifecycle import Coordinator
from .log import LogConfig, Logger, LoggerFactory
from .log.exceptions import InvalidLogLevelError
from .version import version_str


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="procexit", description="Graceful shutdown coordination"
    )
    parser.add_argument("-c", "--config", default=None, help="Path to YAML config file")
    parser.add_argument(
        "--log-level", default=None, help="Override logging.level (trace, debug, info, ...)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    demo = sub.add_parser("demo", help="Run supervised workers until asked to stop")
    demo.add_argument("--workers", type=int, default=2, help="Worker threads (default: 2)")
    demo.add_argument(
        "--unit-secs",
        type=float,
        default=0.1,
        help="Duration of one unit of work that must finish before exit (default: 0.1)",
    )
    demo.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop cleanly after this many seconds (default: run until signalled)",
    )
    demo.add_argument("--exit-code", type=int, default=None, help="Request this exit status")
    demo.add_argument("--fail", default=None, metavar="MSG", help="Report a failure")

    config = sub.add_parser("config", help="Display the resolved configuration")
    config.add_argument(
        "--format", "-f", choices=["yaml", "json"], default="yaml", help="Output format"
    )
    config.add_argument(
        "--no-env", action="store_true", help="Disable environment variable overrides"
    )

    sub.add_parser("version", help="Show version information")
    return parser


def _make_logger(config: Config, level: str | None) -> Logger:
    log_config = LogConfig.from_config(config.to_dict())
    if level is not None:
        log_config = LogConfig.from_params(
            level,
            location=log_config.location,
            micros=log_config.micros,
            colors=log_config.colors,
        )
    return LoggerFactory.create_root(log_config)


def _worker(coordinator: Coordinator, lg: Logger, unit_secs: float) -> None:
    done = coordinator.done_handle()
    units = 0
    while not done.is_set():
        with coordinator.work():
            time.sleep(unit_secs)
        units += 1
    lg.debug("worker stopped", extra={"units": units})


def _cmd_demo(args: argparse.Namespace, lg: Logger, config: Config) -> int:
    coordinator = Coordinator.from_config(lg, config).start()
    worker_lg = LoggerFactory.derive(lg, "worker")

    with coordinator.supervise():
        for i in range(args.workers):
            coordinator.spawn(
                _worker, coordinator, worker_lg, args.unit_secs, name=f"worker-{i}"
            )
        lg.info("demo running", extra={"workers": args.workers, "pid": os.getpid()})

        if args.fail is not None:
            raise coordinator.request_failure(args.fail)
        if args.exit_code is not None:
            raise coordinator.request_exit(args.exit_code)

        coordinator.done_handle().wait(args.duration)

    lg.info("demo finished")
    return 0


def _cmd_config(args: argparse.Namespace, lg: Logger, config: Config) -> int:
    if args.no_env:
        config = Config(args.config, enable_env_overrides=False)
    data = config.to_dict()
    if args.format == "json":
        print(json.dumps(data, indent=2))
    else:
        print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), end="")
    return 0


def _cmd_version(args: argparse.Namespace, lg: Logger, config: Config) -> int:
    print(version_str())
    return 0


_COMMANDS: dict[str, Any] = {
    "demo": _cmd_demo,
    "config": _cmd_config,
    "version": _cmd_version,
}


def main(argv: list[str] | None = None) -> int:
    """Entry point for the procexit command."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = Config(args.config)
        lg = _make_logger(config, args.log_level)
        return int(_COMMANDS[args.command](args, lg, config))
    except (ConfigError, InvalidLogLevelError) as e:
        parser.error(str(e))


if __name__ == "__main__":
    sys.exit(main())
