"""Concurrent collection of per-bureau payloads.

The network clients live outside this package; callers hand in one
zero-argument fetch callable per bureau. Each fetch runs on its own
worker with its own deadline. A failure or timeout turns that bureau's
payload into None and never affects the others.

No retries happen here; retry and backoff belongs to the fetch callable.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from config.settings import FETCH_MAX_WORKERS, FETCH_TIMEOUT_SECONDS
from schemas.source import SOURCE_ORDER, Bureau

logger = logging.getLogger(__name__)

SourceFetcher = Callable[[], Optional[Dict[str, Any]]]


def _safe_fetch(source: Bureau, fetcher: SourceFetcher) -> Optional[Dict[str, Any]]:
    """Run one fetcher, mapping any exception or non-dict result to None."""
    try:
        payload = fetcher()
    except Exception as e:
        logger.warning(f"{source.value} pull failed: {e}")
        return None
    if payload is not None and not isinstance(payload, dict):
        logger.warning(f"{source.value} returned {type(payload).__name__}, expected a JSON object")
        return None
    return payload


def collect_source_payloads(
    fetchers: Mapping[Bureau, SourceFetcher],
    timeout: float = FETCH_TIMEOUT_SECONDS,
    order: Sequence[Bureau] = SOURCE_ORDER,
) -> Dict[Bureau, Optional[Dict[str, Any]]]:
    """Fetch every bureau in parallel and return whatever arrived in time.

    Args:
        fetchers: Bureau -> zero-argument callable returning the raw payload.
            Bureaus without a fetcher are reported as None.
        timeout: Seconds each source may take, measured from submission.
        order: Bureaus to report on, in result order.

    Returns:
        Dict with one entry per bureau in `order`; None for failed,
        timed-out or missing sources.
    """
    results: Dict[Bureau, Optional[Dict[str, Any]]] = {source: None for source in order}
    active = [source for source in order if fetchers.get(source) is not None]
    if not active:
        return results

    executor = ThreadPoolExecutor(max_workers=max(1, min(FETCH_MAX_WORKERS, len(active))))
    try:
        started = time.monotonic()
        futures = {source: executor.submit(_safe_fetch, source, fetchers[source]) for source in active}

        for source, future in futures.items():
            remaining = max(0.0, timeout - (time.monotonic() - started))
            try:
                results[source] = future.result(timeout=remaining)
            except FutureTimeoutError:
                future.cancel()
                logger.warning(f"{source.value} pull timed out after {timeout:.1f}s")
    finally:
        # Do not block on stragglers; their results are discarded
        executor.shutdown(wait=False, cancel_futures=True)

    available = sum(1 for payload in results.values() if payload is not None)
    logger.info(f"Collected {available} of {len(order)} bureau payloads")
    return results
