"""Shared HTTP plumbing for weather, geocoding and station sources."""

import logging
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from metgen.errors import MalformedPayload, ProviderUnavailable, Stage

logger = logging.getLogger(__name__)

RETRY_STATUSES = (429, 500, 502, 503, 504)


class HttpSource:
    """
    Base class for blocking HTTP collaborators.

    Requests always carry a timeout. Sessions built here retry a failed
    GET once with backoff; injected sessions (tests) are used as is.
    """

    name = "http"
    DEFAULT_TIMEOUT = 10
    USER_AGENT = "metgen/0.1 (synthesized METAR generator)"

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = 1,
        backoff_factor: float = 0.5,
    ):
        """
        Args:
            session: Optional requests.Session for dependency injection (testing).
            timeout: HTTP request timeout in seconds.
            retries: Retries after the first attempt for idempotent requests.
            backoff_factor: urllib3 backoff factor between retries.
        """
        self._session = session or self._build_session(retries, backoff_factor)
        self._timeout = timeout
        self._session.headers.setdefault("User-Agent", self.USER_AGENT)

    @staticmethod
    def _build_session(retries: int, backoff_factor: float) -> requests.Session:
        retry = Retry(
            total=retries,
            connect=retries,
            read=retries,
            backoff_factor=backoff_factor,
            status_forcelist=RETRY_STATUSES,
            allowed_methods=("GET",),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session = requests.Session()
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def _get_json(self, url: str, params: dict, stage: Stage = Stage.FETCH) -> Optional[Any]:
        """
        GET a JSON document.

        Returns None when the provider answers "no data" (204 or 404).

        Raises:
            ProviderUnavailable: network failure, timeout, auth, quota or
                server error
            MalformedPayload: the body is not JSON
        """
        response = self._get(url, params, stage)
        if response is None:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedPayload(f"{self.name} returned a non-JSON body", stage=Stage.NORMALIZE) from e

    def _get_text(self, url: str, params: dict, stage: Stage = Stage.FETCH) -> str:
        response = self._get(url, params, stage)
        if response is None:
            return ""
        return response.text

    def _get(self, url: str, params: dict, stage: Stage) -> Optional[requests.Response]:
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
        except requests.Timeout as e:
            logger.warning("%s request timed out: %s", self.name, url)
            raise ProviderUnavailable(f"{self.name} timed out", stage=stage) from e
        except requests.RequestException as e:
            logger.warning("%s request failed: %s", self.name, e)
            raise ProviderUnavailable(f"{self.name} request failed: {e}", stage=stage) from e
        return self._check_status(response, stage)

    def _check_status(self, response: requests.Response, stage: Stage) -> Optional[requests.Response]:
        status = response.status_code
        if status in (204, 404):
            return None
        if status in (401, 403):
            raise ProviderUnavailable(f"{self.name} rejected the API key (HTTP {status})", stage=stage)
        if status == 429:
            raise ProviderUnavailable(f"{self.name} rate limit exceeded", stage=stage)
        if status >= 400:
            logger.warning("%s returned HTTP %s", self.name, status)
            raise ProviderUnavailable(f"{self.name} returned HTTP {status}", stage=stage)
        return response
