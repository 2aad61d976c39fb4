"""
Share search loop.

Walks consecutive nonces from a starting point, inserts each into the job's
header template, awaits the injected hash provider and checks the digest
against the job target. The search is bounded by an estimated attempt
budget (hashes_per_second * time_budget) and by a wall-clock budget, and
yields to the event loop periodically so many searches can share it.

Usage:
    share = await search(job, start_nonce, hash_fn, SearchConfig(), log=log)
    if share is not None:
        await client.submit(share.job_id, share.nonce_hex, share.result_hex)
"""

import asyncio
import inspect
import logging
import math
import time
from dataclasses import dataclass
from typing import Optional

from . import events
from .events import EventLog
from .providers import HashFn
from ..crypto.header import DEFAULT_NONCE_OFFSET, encode_nonce, insert_nonce
from ..crypto.target import digest_meets, is_unsupported_target, parse_target

logger = logging.getLogger(__name__)

_NONCE_MASK = 0xFFFFFFFF


def _decode_hex(value: Optional[str], what: str) -> bytes:
    if not value:
        return b""
    data = value[2:] if value[:2] in ("0x", "0X") else value
    try:
        return bytes.fromhex(data)
    except ValueError as e:
        raise ValueError(f"invalid {what} hex: {e}") from e


@dataclass(frozen=True)
class Job:
    """A mining job from the pool client. Read-only during a search."""
    job_id: str
    blob: bytes      # header template
    target: bytes = b""   # 0, 4 or 8 bytes

    @classmethod
    def from_hex(cls, job_id: str, blob_hex: str, target_hex: Optional[str] = None) -> "Job":
        """Build a job from the hex fields a pool sends."""
        return cls(
            job_id=str(job_id),
            blob=_decode_hex(blob_hex, "blob"),
            target=_decode_hex(target_hex, "target"),
        )


@dataclass(frozen=True)
class Share:
    """A nonce whose digest satisfies the job target."""
    job_id: str
    nonce: int
    result: bytes

    @property
    def nonce_hex(self) -> str:
        """Nonce bytes as they appear in the header (little-endian)."""
        return encode_nonce(self.nonce).hex()

    @property
    def result_hex(self) -> str:
        return self.result.hex()


@dataclass
class SearchConfig:
    """
    Search budget and reporting cadence.

    Attributes:
        hashes_per_second: Expected hash rate, sizes the attempt budget
        time_budget_ms: Wall-clock budget per search
        yield_every: Attempts between event-loop yields (<= 0 disables)
        log_every: Attempts between progress events (<= 0 disables)
        strict_header: Raise MalformedHeader on undecodable templates
            instead of using fallback_offset
        fallback_offset: Nonce offset for undecodable templates
    """
    hashes_per_second: float = 500
    time_budget_ms: float = 1000
    yield_every: int = 200
    log_every: int = 100
    strict_header: bool = False
    fallback_offset: int = DEFAULT_NONCE_OFFSET

    @property
    def max_attempts(self) -> int:
        budget = self.hashes_per_second * self.time_budget_ms / 1000
        if not math.isfinite(budget):
            raise ValueError(f"attempt budget must be finite, got {budget}")
        return max(1, math.floor(budget))


@dataclass
class SearchStats:
    """Per-search counters, filled in when passed to search()."""
    attempts: int = 0
    elapsed_ms: float = 0.0
    found: bool = False

    @property
    def hashrate(self) -> float:
        """Average hashrate in H/s."""
        return self.attempts * 1000.0 / self.elapsed_ms if self.elapsed_ms > 0 else 0.0


async def _call_hash(hash_fn: HashFn, blob: bytes) -> bytes:
    result = hash_fn(blob)
    if inspect.isawaitable(result):
        result = await result
    return result


async def search(
    job: Job,
    start_nonce: int,
    hash_fn: HashFn,
    config: Optional[SearchConfig] = None,
    log: Optional[EventLog] = None,
    stats: Optional[SearchStats] = None,
) -> Optional[Share]:
    """
    Search for a nonce whose digest meets the job target.

    Args:
        job: Job to mine
        start_nonce: First nonce to try (wraps at 2^32)
        hash_fn: `blob -> digest`, awaited once per attempt
        config: Budget and cadence (defaults to SearchConfig())
        log: Optional `(event, payload)` callback
        stats: Optional SearchStats to fill in

    Returns:
        The first Share found, or None when the budget ran out

    Errors from `hash_fn` propagate; the loop does not retry.
    """
    config = config or SearchConfig()
    emit = log or (lambda event, payload: None)
    max_attempts = config.max_attempts
    bound = parse_target(job.target)

    if is_unsupported_target(job.target):
        logger.warning(
            f"Job {job.job_id}: {len(job.target)}-byte target is not 4 or 8 bytes, "
            f"accepting every digest"
        )

    start = time.monotonic()

    def _finish(attempts: int, found: bool) -> None:
        if stats is not None:
            stats.attempts = attempts
            stats.found = found
            stats.elapsed_ms = (time.monotonic() - start) * 1000.0

    for attempt in range(max_attempts):
        nonce = (start_nonce + attempt) & _NONCE_MASK
        blob, offset = insert_nonce(
            job.blob,
            nonce,
            strict=config.strict_header,
            fallback=config.fallback_offset,
        )
        emit(events.NONCE_OFFSET, {"job_id": job.job_id, "offset": offset})

        digest = await _call_hash(hash_fn, blob)

        if digest_meets(digest, bound):
            emit(events.SHARE_FOUND, {"job_id": job.job_id, "nonce": nonce, "attempt": attempt})
            _finish(attempt + 1, True)
            return Share(job_id=job.job_id, nonce=nonce, result=bytes(digest))

        if attempt > 0 and config.log_every > 0 and attempt % config.log_every == 0:
            emit(events.PROGRESS, {"job_id": job.job_id, "attempt": attempt, "nonce": nonce})

        if attempt > 0 and config.yield_every > 0 and attempt % config.yield_every == 0:
            await asyncio.sleep(0)

        elapsed_ms = (time.monotonic() - start) * 1000.0
        if elapsed_ms >= config.time_budget_ms:
            emit(events.TIME_BUDGET, {
                "job_id": job.job_id,
                "attempt": attempt,
                "elapsed_ms": round(elapsed_ms, 3),
            })
            _finish(attempt + 1, False)
            return None

    emit(events.SHARE_EXHAUSTED, {"job_id": job.job_id, "attempts": max_attempts})
    _finish(max_attempts, False)
    return None
