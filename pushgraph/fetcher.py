"""Fetch .taskcluster.yml over HTTP with a fixed timeout and retry budget."""

import logging
import time
from collections.abc import Callable

import httpx

from pushgraph.errors import TemplateFetchError

logger = logging.getLogger(__name__)

GRAPH_RETRIES = 2
GRAPH_INTERVAL = 5.0  # seconds between attempts
GRAPH_REQ_TIMEOUT = 30.0


def fetch_template(
    url: str,
    *,
    retries: int = GRAPH_RETRIES,
    interval: float = GRAPH_INTERVAL,
    timeout: float = GRAPH_REQ_TIMEOUT,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """GET url and return the body text.

    Network errors and non-2xx responses are retried up to `retries` times.
    Raises TemplateFetchError wrapping the last failure once the budget is spent.
    """
    if not url:
        raise ValueError("url is required")

    attempt = 0
    while True:
        attempt += 1
        try:
            response = httpx.get(url, timeout=timeout, follow_redirects=True)
            response.raise_for_status()
            return response.text
        except httpx.HTTPError as exc:
            if attempt > retries:
                raise TemplateFetchError(url, exc) from exc
            logger.warning("Fetching %s failed (attempt %d of %d): %s", url, attempt, retries + 1, exc)
            sleep(interval)
