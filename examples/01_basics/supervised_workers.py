#!/usr/bin/env python3
"""
Supervised worker threads with graceful shutdown.

This example demonstrates:
- Running the top-level routine under Coordinator.supervise()
- Worker threads that finish their current unit of work before exit
- Requesting an explicit exit status from the main routine

Usage:
    python supervised_workers.py                 # Ctrl-C once: drain, exit 130
    python supervised_workers.py                 # Ctrl-C twice: exit 130 at once
    python supervised_workers.py --stop-after 3  # exit 0 after 3 seconds
"""

import argparse
import pathlib
import sys
import time

# Add the project root to the path
project_root = str(pathlib.Path(__file__).resolve().parents[2])
sys.path.append(project_root) if project_root not in sys.path else None

from procexit import Coordinator, LogConfig, LoggerFactory


def worker(coordinator, lg, worker_id):
    done = coordinator.done_handle()
    while not done.is_set():
        with coordinator.work():
            lg.info("processing", extra={"worker": worker_id})
            time.sleep(1)
    lg.info("worker done", extra={"worker": worker_id})


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--stop-after", type=float, default=None)
    args = parser.parse_args()

    lg = LoggerFactory.create_root(LogConfig.from_params("debug"))
    coordinator = Coordinator(lg).start()
    worker_lg = LoggerFactory.derive(lg, "worker")

    with coordinator.supervise():
        for i in range(3):
            coordinator.spawn(worker, coordinator, worker_lg, i, name=f"worker-{i}")

        if not coordinator.done_handle().wait(args.stop_after):
            lg.info("time is up")
            raise coordinator.request_exit(0)


if __name__ == "__main__":
    main()
