"""
HTTP client infrastructure for changelog.

Wraps a requests.Session so registry and GitHub calls can be awaited:
each request runs in the event loop's default executor with a bounded
timeout. Status handling is shared by every endpoint:
- 2xx: parsed body
- 404: None (a normal "not found" outcome)
- anything else: APIError carrying status and body text
Transport failures raise NetworkError.
"""

import asyncio
import functools
import logging
from typing import Optional, Dict, Any

import requests

from ..config import get_setting
from ..exit_codes import APIError, NetworkError

logger = logging.getLogger(__name__)

# Keep error bodies readable in messages
MAX_ERROR_BODY = 500


class HttpClient:
    """
    Minimal asynchronous JSON/text client over requests.

    Example:
        with HttpClient(timeout=5) as client:
            data = await client.get_json("https://crates.io/api/v1/crates/ripgrep")
        if data is None:
            print("not found")
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
        config=None,
    ):
        """
        Initialize HttpClient.

        Args:
            timeout: Per-request timeout in seconds (defaults to http.timeout_seconds)
            user_agent: User-Agent header (defaults to http.user_agent)
            session: Pre-built session, mainly for tests
            config: Loaded configuration
        """
        self.timeout = timeout or get_setting(config, 'http', 'timeout_seconds', 10)
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': user_agent or get_setting(config, 'http', 'user_agent', 'changelog-cli'),
        })

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        """Perform a GET request off the event loop."""
        logger.debug(f"GET {url}")
        loop = asyncio.get_running_loop()
        call = functools.partial(self.session.get, url, headers=headers or {}, timeout=self.timeout)
        try:
            return await loop.run_in_executor(None, call)
        except requests.RequestException as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e

    async def get_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> Optional[Any]:
        """
        Fetch a JSON document.

        Returns:
            Decoded JSON, or None on 404

        Raises:
            APIError: Non-2xx, non-404 status or a body that is not JSON
            NetworkError: The request could not be completed
        """
        response = await self.get(url, headers=headers)
        if not self.check_status(url, response):
            return None
        try:
            return response.json()
        except ValueError as e:
            raise APIError(f"Invalid JSON from {url}: {e}", status=response.status_code) from e

    async def get_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> Optional[str]:
        """Fetch a raw text body, or None on 404."""
        response = await self.get(url, headers=headers)
        if not self.check_status(url, response):
            return None
        return response.text

    def check_status(self, url: str, response: requests.Response) -> bool:
        """Return True for 2xx, False for 404, raise for anything else."""
        status = response.status_code
        if 200 <= status < 300:
            return True
        if status == 404:
            logger.debug(f"404 for {url}")
            return False
        body = (response.text or '')[:MAX_ERROR_BODY]
        raise APIError(f"{url} returned {status}: {body}", status=status, body=body)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> 'HttpClient':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
