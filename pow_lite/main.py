"""
pow-lite — CLI Entry Point

Runs a single share search over a header template with a hashlib-backed
hash provider. Useful to benchmark the search loop and to check how a
pool's blob/target pair is interpreted.

Usage:
    # Synthetic header, no difficulty
    python -m pow_lite

    # Pool job fields
    python -m pow_lite --blob 0100... --target ffff0000 --job-id 42 \
                       --start-nonce 1000 --time-budget-ms 5000
"""

import argparse
import asyncio
import logging
import math
import sys
from concurrent.futures import ThreadPoolExecutor

from .crypto.header import DEFAULT_NONCE_OFFSET, NONCE_SIZE, parse_header
from .crypto.target import describe_target
from .crypto.varint import encode_varint
from .errors import MalformedHeader, PowError
from .mining.events import logging_event_log
from .mining.providers import executor_hash_fn, hashlib_hash_fn
from .mining.search import Job, SearchConfig, SearchStats, search

logger = logging.getLogger("pow_lite")

EXIT_FOUND = 0
EXIT_NOT_FOUND = 1
EXIT_BAD_INPUT = 2


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def synthetic_blob(timestamp: int = 1700000000) -> bytes:
    """Header template: [1, 0, timestamp] varints, zero prev hash, zero nonce, zero tail."""
    prefix = encode_varint(1) + encode_varint(0) + encode_varint(timestamp)
    return prefix + bytes(32) + bytes(NONCE_SIZE) + bytes(32)


def _budget_value(value: str) -> float:
    """argparse type: finite, non-negative float."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}")
    if not math.isfinite(number) or number < 0:
        raise argparse.ArgumentTypeError(f"must be a finite, non-negative number: {value!r}")
    return number


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="pow-lite — proof-of-work share search",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Synthetic job:  python -m pow_lite --time-budget-ms 2000
  Pool job:       python -m pow_lite --blob 0100... --target ffff0000
        """,
    )

    # Job
    parser.add_argument(
        "--blob", type=str, default="",
        help="Header template hex (default: synthetic header)",
    )
    parser.add_argument(
        "--target", type=str, default="",
        help="Target hex, 4 or 8 bytes (default: none, accept any digest)",
    )
    parser.add_argument(
        "--job-id", type=str, default="local",
        help="Job identifier (default: local)",
    )
    parser.add_argument(
        "--start-nonce", type=lambda v: int(v, 0), default=0,
        help="First nonce to try (default: 0)",
    )

    # Search config
    parser.add_argument(
        "--hashes-per-second", type=_budget_value, default=500,
        help="Expected hashrate, sizes the attempt budget (default: 500)",
    )
    parser.add_argument(
        "--time-budget-ms", type=_budget_value, default=1000,
        help="Wall-clock budget in milliseconds (default: 1000)",
    )
    parser.add_argument(
        "--yield-every", type=int, default=200,
        help="Attempts between event loop yields (default: 200)",
    )
    parser.add_argument(
        "--log-every", type=int, default=100,
        help="Attempts between progress events (default: 100)",
    )
    parser.add_argument(
        "--strict-header", action="store_true",
        help=f"Fail on undecodable headers instead of using offset {DEFAULT_NONCE_OFFSET}",
    )

    # Hashing
    parser.add_argument(
        "--algo", type=str, default="sha3_256",
        help="hashlib algorithm used as the hash provider (default: sha3_256)",
    )
    parser.add_argument(
        "--threads", "-t", type=int, default=1,
        help="Executor threads for the hash provider (default: 1)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Verbose debug output (per-attempt events)",
    )

    return parser.parse_args(argv)


def _format_hashrate(h: float) -> str:
    """Format hashrate with appropriate SI prefix."""
    if h >= 1e6:
        return f"{h / 1e6:.2f} MH/s"
    elif h >= 1e3:
        return f"{h / 1e3:.2f} KH/s"
    else:
        return f"{h:.2f} H/s"


async def run_search(args: argparse.Namespace) -> int:
    """Run one search for the job described by `args`; returns an exit code."""
    try:
        blob_hex = args.blob or synthetic_blob().hex()
        job = Job.from_hex(args.job_id, blob_hex, args.target)
        hash_func = hashlib_hash_fn(args.algo)
        config = SearchConfig(
            hashes_per_second=args.hashes_per_second,
            time_budget_ms=args.time_budget_ms,
            yield_every=args.yield_every,
            log_every=args.log_every,
            strict_header=args.strict_header,
        )
        max_attempts = config.max_attempts
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return EXIT_BAD_INPUT

    try:
        layout = parse_header(job.blob)
        logger.info(
            f"Header: v{layout.major_version}.{layout.minor_version} "
            f"timestamp={layout.timestamp} nonce_offset={layout.nonce_offset}"
        )
    except MalformedHeader as e:
        logger.warning(f"Header: {e}")

    logger.info("=" * 60)
    logger.info(f"  Job: {job.job_id} ({len(job.blob)} byte template)")
    logger.info(f"  Target: {describe_target(job.target)}")
    logger.info(f"  Start nonce: {args.start_nonce & 0xFFFFFFFF}")
    logger.info(f"  Attempt budget: {max_attempts} / {config.time_budget_ms:g}ms")
    logger.info(f"  Hash: {args.algo} ({args.threads} thread(s))")
    logger.info("=" * 60)

    stats = SearchStats()
    with ThreadPoolExecutor(max_workers=max(1, args.threads)) as executor:
        try:
            share = await search(
                job,
                args.start_nonce,
                executor_hash_fn(hash_func, executor),
                config,
                log=logging_event_log(logging.getLogger("pow_lite.events")),
                stats=stats,
            )
        except PowError as e:
            logger.error(f"Search failed: {e}")
            return EXIT_BAD_INPUT

    logger.info(
        f"Attempts: {stats.attempts:,} in {stats.elapsed_ms:.1f}ms "
        f"({_format_hashrate(stats.hashrate)})"
    )
    if share is None:
        logger.info("No share found")
        return EXIT_NOT_FOUND

    logger.info(f"*** SHARE FOUND! nonce={share.nonce} ({share.nonce_hex}) ***")
    print(f"{share.job_id} {share.nonce_hex} {share.result_hex}")
    return EXIT_FOUND


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.verbose)
    sys.exit(asyncio.run(run_search(args)))


if __name__ == "__main__":
    main()
