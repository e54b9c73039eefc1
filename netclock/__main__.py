"""
Entry point for `python -m netclock`.

Usage:
    python -m netclock [--url ws://localhost:8080/ws/clock] [--sample-size 11]
"""

import asyncio
import argparse
import logging
import signal
import sys

from .client import ClockClient
from .config import ClockConfig, ConfigError

logger = logging.getLogger("ClockClient")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Netclock - server clock sync client")
    parser.add_argument("--url", "-u", default="ws://localhost:8080/ws/clock")
    parser.add_argument("--sample-size", type=int, default=11,
                        help="Replies per averaging window")
    parser.add_argument("--sample-rate-ms", type=float, default=500,
                        help="Interval between sync probes (ms)")
    parser.add_argument("--min-latency", type=int, default=20,
                        help="Outlier noise floor (ms)")
    parser.add_argument("--ticks-per-second", type=int, default=60)
    parser.add_argument("--frame-rate", type=float, default=60)
    parser.add_argument("--stats-interval", type=float, default=5.0,
                        help="Seconds between stats log lines")
    parser.add_argument("--no-compression", action="store_true")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser.parse_args(argv)


def build_config(args) -> ClockConfig:
    return ClockConfig(
        sample_size=args.sample_size,
        sample_rate_ms=args.sample_rate_ms,
        min_latency_floor_ms=args.min_latency,
        ticks_per_second=args.ticks_per_second,
        frame_rate=args.frame_rate,
        compression=not args.no_compression,
        stats_interval_s=args.stats_interval,
    )


async def run(args, config: ClockConfig):
    print(f"URL:    {args.url}")
    print(f"Window: {config.sample_size} samples every {config.sample_rate_ms:g}ms\n")

    client = ClockClient(url=args.url, config=config)

    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, shutdown.set)

    try:
        if await client.connect():
            print("Connected. Synchronizing...\n")

            async def stats_printer():
                while not shutdown.is_set():
                    await asyncio.sleep(config.stats_interval_s)
                    logger.info(f"Stats: {client.stats}")

            task = asyncio.create_task(stats_printer())
            await shutdown.wait()
            task.cancel()
        else:
            print("Connection failed")
            return 1
    finally:
        await client.close()

    return 0


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    try:
        config = build_config(args)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        sys.exit(asyncio.run(run(args, config)))
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
