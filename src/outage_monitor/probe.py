from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Optional

from .errors import ProbeError
from .models import Endpoint

logger = logging.getLogger(__name__)


class ProbeResult:
    __slots__ = ("endpoint", "ok", "elapsed", "error")

    def __init__(
        self,
        endpoint: Endpoint,
        ok: bool,
        elapsed: float,
        error: Optional[ProbeError],
    ):
        self.endpoint = endpoint
        self.ok = ok
        self.elapsed = elapsed
        self.error = error

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"ProbeResult(endpoint={self.endpoint}, ok={self.ok}, elapsed={self.elapsed:.3f}, error={self.error!r})"


async def probe_endpoint(endpoint: Endpoint, timeout: float) -> ProbeResult:
    """Open one TCP connection to ``endpoint`` and close it again.

    Refused, unreachable, unresolvable and timed-out connections all come
    back as ok=False with the cause wrapped in a ProbeError; nothing is raised.
    Hostnames the resolver cannot encode (empty or oversized IDNA labels)
    count as unreachable too.
    """
    start = time.monotonic()
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(endpoint.host, endpoint.port),
            timeout=timeout,
        )
    except (OSError, asyncio.TimeoutError, ValueError) as exc:
        elapsed = time.monotonic() - start
        reason = "timed out" if isinstance(exc, asyncio.TimeoutError) else "failed"
        return ProbeResult(
            endpoint, False, elapsed, ProbeError(f"connection to {endpoint} {reason}", exc)
        )

    elapsed = time.monotonic() - start
    writer.close()
    with contextlib.suppress(OSError):
        await writer.wait_closed()
    return ProbeResult(endpoint, True, elapsed, None)


async def check(endpoint: Endpoint, timeout: float) -> bool:
    """Reachability of ``endpoint`` within ``timeout`` seconds."""
    res = await probe_endpoint(endpoint, timeout)
    if not res.ok:
        logger.info("Connection failed after %.3fs: %s", res.elapsed, res.error)
    return res.ok
