"""
Hash provider adapters.

The search loop awaits `hash_fn(blob) -> digest`. Real PoW hashes are
CPU-heavy and usually synchronous, so they are pushed to an executor to
keep the event loop free for other searches and network I/O.
"""

import asyncio
import hashlib
import inspect
import logging
from concurrent.futures import Executor
from typing import Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

# `blob -> digest`; the result may be returned directly or awaited.
HashFn = Callable[[bytes], Union[bytes, Awaitable[bytes]]]


def executor_hash_fn(
    func: Callable[[bytes], bytes], executor: Optional[Executor] = None
) -> HashFn:
    """
    Wrap a blocking hash function so each call runs in `executor`.

    Args:
        func: Blocking `bytes -> bytes` hash
        executor: Thread/process pool (None uses the loop's default executor)
    """
    async def _hash(blob: bytes) -> bytes:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(executor, func, blob)

    return _hash


def hex_hash_fn(func: Callable[[str], object]) -> HashFn:
    """
    Adapt a provider that takes and returns hex strings.

    `func` may return the hex digest directly or an awaitable of it.
    """
    async def _hash(blob: bytes) -> bytes:
        result = func(blob.hex())
        if inspect.isawaitable(result):
            result = await result
        return bytes.fromhex(result)

    return _hash


def hashlib_hash_fn(name: str = "sha3_256") -> Callable[[bytes], bytes]:
    """
    Blocking hash over a hashlib algorithm, for benchmarks and smoke runs.

    Raises:
        ValueError: the algorithm is not available
    """
    try:
        hashlib.new(name)
    except ValueError as e:
        raise ValueError(f"Unsupported hash algo '{name}': {e}") from e

    def _hash(blob: bytes) -> bytes:
        h = hashlib.new(name, blob)
        if name.startswith("shake_"):
            return h.digest(32)
        return h.digest()

    logger.debug(f"Using hashlib provider: {name}")
    return _hash
