"""Shared HTTP transport utilities for the REST adapters.

This module provides a thin wrapper around ``requests.Session`` so the user
listing client and the image cache share timeout policy, retry behavior and
header construction.

Dependencies:
    - ``requests`` for network I/O.
    - ``userdeck.domain.errors`` for typed transport failures.

Call context:
    - Constructed by ``userdeck/adapters/user_rest.py`` and
      ``userdeck/adapters/image_cache.py``.
    - Used only inside adapter layer methods; view models interact through ports.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests
from requests import exceptions as req_exc

from userdeck.domain.errors import InvalidURL, NetworkFailure

SleepFn = Callable[[float], None]

_URL_ERRORS = (req_exc.InvalidURL, req_exc.MissingSchema, req_exc.InvalidSchema)


@dataclass
class HttpConfig:
    """Timeout and retry configuration for adapter HTTP calls.

    Attributes:
        request_timeout_s: Connect timeout in seconds.
        resource_timeout_s: Read timeout in seconds for the whole body.
        retries: Default number of retry attempts after the initial request.
        retry_delay_s: Default pause before each retry.
        user_agent: ``User-Agent`` header value.
    """
    request_timeout_s: float = 30
    resource_timeout_s: float = 60
    retries: int = 2
    retry_delay_s: float = 1.0
    user_agent: str = "userdeck/0.1"


class RetryingSession:
    """Shared requests wrapper with retry-after-delay loops.

    This class is transport-only. Callers provide endpoint URLs and decide
    how to map non-2xx responses into domain errors. The retry loop never
    re-checks reachability; it repeats the identical request.
    """

    def __init__(
        self,
        cfg: Optional[HttpConfig] = None,
        *,
        session: Optional[requests.Session] = None,
        sleep: SleepFn = time.sleep,
    ) -> None:
        """Create a retry-enabled session.

        Args:
            cfg: Shared timeout and retry settings.
            session: Pre-built ``requests.Session`` (tests inject stubs).
            sleep: Delay function used between attempts.
        """
        self._log = logging.getLogger(__name__)
        self.cfg = cfg or HttpConfig()
        self.session = session if session is not None else requests.Session()
        self._sleep = sleep

    def _headers(self, accept: str = "application/json") -> Dict[str, str]:
        return {"Accept": accept, "User-Agent": self.cfg.user_agent}

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        accept: str = "application/json",
        retries: Optional[int] = None,
        retry_delay_s: Optional[float] = None,
    ) -> requests.Response:
        """Send a GET request with retries on transport failures.

        Args:
            url: Absolute endpoint URL.
            params: Optional query parameter mapping.
            accept: ``Accept`` header value.
            retries: Retry budget override; ``0`` disables retrying.
            retry_delay_s: Pause before each retry override.

        Returns:
            ``requests.Response`` from the first attempt that produced one,
            whatever its status code.

        Raises:
            InvalidURL: The URL cannot be sent at all (never retried).
            NetworkFailure: Every attempt failed at the transport level.
        """
        budget = self.cfg.retries if retries is None else max(0, int(retries))
        delay = self.cfg.retry_delay_s if retry_delay_s is None else max(0.0, float(retry_delay_s))
        attempts = budget + 1
        attempt = 1
        while True:
            try:
                return self.session.get(
                    url,
                    params=params,
                    headers=self._headers(accept=accept),
                    timeout=(self.cfg.request_timeout_s, self.cfg.resource_timeout_s),
                )
            except _URL_ERRORS as exc:
                raise InvalidURL(url) from exc
            except req_exc.RequestException as exc:
                self._log.warning("GET %s failed: %s", url, exc)
                if attempt >= attempts:
                    raise NetworkFailure(exc, attempts=attempts) from exc
            attempt += 1
            self._log.info(
                "Retrying GET %s in %.2fs (attempt %d/%d)", url, delay, attempt, attempts
            )
            self._sleep(delay)


__all__ = ["HttpConfig", "RetryingSession"]
