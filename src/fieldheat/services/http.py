"""
Shared HTTP sessions with a default timeout.

Two flavours of ``requests.Session``:

- ``provider_session``: no retries. Provider calls made while answering a
  request get exactly one attempt each; a timeout or failure simply hands
  over to the next provider in the fallback chain.
- ``create_session(retry=BACKFILL_RETRY)``: retries transient errors with
  exponential backoff, for unattended jobs such as the historical backfill.

Usage::

    from fieldheat.services.http import provider_session

    resp = provider_session.get("https://api.example.com/v1/data")
    resp.raise_for_status()
"""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from fieldheat import __version__

#: Single attempt, no redirects retried, no status-based retries.
NO_RETRY = Retry(total=0, connect=0, read=0, status=0, raise_on_status=False)

#: Backfill retry strategy, handles the transient errors we see in practice.
BACKFILL_RETRY = Retry(
    total=4,
    backoff_factor=2,  # 0s, 2s, 4s, 8s between retries
    status_forcelist=[429, 502, 503, 504],
    allowed_methods=["GET", "HEAD", "OPTIONS"],
    raise_on_status=False,  # let resp.raise_for_status() handle it
)

DEFAULT_TIMEOUT = 30  # seconds

USER_AGENT = f"fieldheat/{__version__}"


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> requests.Session:
    """
    Build a ``requests.Session`` with a retry adapter mounted.

    Args:
        retry: Retry strategy (defaults to ``NO_RETRY``).
        timeout: Default timeout applied to every request.
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retry or NO_RETRY)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = USER_AGENT

    # Inject a default timeout so callers don't need to remember to pass
    # ``timeout=`` every time.
    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


#: Module-level session for provider calls, import and use directly.
provider_session: requests.Session = create_session()
