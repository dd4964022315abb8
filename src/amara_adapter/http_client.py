"""
HTTPClient module for sending Amara API requests with linear backoff retries
"""

import logging
import time
import requests
from typing import Dict, Any, Optional, Union
from datetime import datetime
from dataclasses import dataclass, field

from amara_adapter.errors import RetriesExhaustedError, UnsupportedMethodError


logger = logging.getLogger(__name__)


@dataclass
class APIRequest:
    """Represents a single API request"""
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    method: str = "GET"
    body: Optional[Union[str, bytes, Dict[str, Any]]] = None


@dataclass
class APIResponse:
    """Raw API response as returned by the transport"""
    status_code: int
    raw_body: str
    headers: Dict[str, str] = field(default_factory=dict)
    attempts: int = 1
    request_timestamp: datetime = field(default_factory=datetime.now)


class HTTPClient:
    """HTTP transport with linear backoff on transient failures"""

    SUPPORTED_METHODS = ('GET', 'POST', 'PUT', 'DELETE')

    # 429: API quota exceeded, resets every minute. 504: gateway timeout.
    RETRYABLE_STATUS_CODES = {429, 504}

    def __init__(self, max_retries: int = 10, backoff_seconds: float = 30.0,
                 verify_tls: bool = True, timeout_seconds: Optional[float] = 60.0,
                 deadline_seconds: Optional[float] = None,
                 raise_on_exhausted: bool = False):
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.verify_tls = verify_tls
        self.timeout_seconds = timeout_seconds
        self.deadline_seconds = deadline_seconds
        self.raise_on_exhausted = raise_on_exhausted
        self.session: Optional[requests.Session] = None

        if not verify_tls:
            logger.warning("TLS certificate verification is disabled")

    def send(self, method: str, headers: Dict[str, str], url: str,
             body: Optional[Union[str, bytes, Dict[str, Any]]] = None) -> Optional[APIResponse]:
        """
        Send one request, retrying it from scratch on transient failures

        Args:
            method: HTTP method, one of GET, POST, PUT, DELETE
            headers: Complete request headers
            url: Fully built request URL
            body: Request body for POST and PUT, already serialised

        Returns:
            APIResponse for any non-retryable status, or None when the retry
            budget ran out. None means the outcome is unknown: a POST may or
            may not have been applied server-side.

        Raises:
            UnsupportedMethodError: If the method is not supported
            RetriesExhaustedError: If retries ran out and raise_on_exhausted is set
        """
        return self.make_request(APIRequest(url=url, headers=headers, method=method, body=body))

    def make_request(self, request: APIRequest) -> Optional[APIResponse]:
        """
        Make HTTP request with integrated retry logic and linear backoff

        Args:
            request: APIRequest object containing request details

        Returns:
            APIResponse object, or None after exhausting retries
        """
        method = request.method.upper()
        if method not in self.SUPPORTED_METHODS:
            raise UnsupportedMethodError(f"Unsupported HTTP method: {request.method}")

        if self.session is None:
            self.session = requests.Session()

        started = time.monotonic()
        request_timestamp = datetime.now()
        attempt = 0
        last_error = ''

        while True:
            attempt += 1
            try:
                response = self.session.request(
                    method,
                    request.url,
                    headers=request.headers,
                    data=request.body if method in ('POST', 'PUT') else None,
                    timeout=self.timeout_seconds,
                    verify=self.verify_tls
                )
            except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
                last_error = str(e)
                logger.warning(f"{method} {request.url} failed on attempt {attempt}: {e}")
            else:
                if response.status_code not in self.RETRYABLE_STATUS_CODES:
                    logger.debug(f"{method} {request.url} -> {response.status_code} (attempt {attempt})")
                    return APIResponse(
                        status_code=response.status_code,
                        raw_body=response.text,
                        headers=dict(response.headers),
                        attempts=attempt,
                        request_timestamp=request_timestamp
                    )
                last_error = f"HTTP {response.status_code}"
                logger.warning(f"{method} {request.url} returned {response.status_code} on attempt {attempt}")

            if attempt > self.max_retries:
                break

            delay = self.backoff_seconds * attempt
            if self.deadline_seconds is not None:
                elapsed = time.monotonic() - started
                if elapsed + delay > self.deadline_seconds:
                    logger.error(f"{method} {request.url} would exceed the {self.deadline_seconds}s deadline")
                    break
            time.sleep(delay)

        logger.error(f"{method} {request.url} gave up after {attempt} attempts. Last error: {last_error}")
        if self.raise_on_exhausted:
            raise RetriesExhaustedError(
                f"Failed after {attempt - 1} retry attempts. Last error: {last_error}"
            )
        return None

    def close_connection(self) -> None:
        """
        Close HTTP session and release resources
        """
        if self.session:
            self.session.close()
            self.session = None

    def __enter__(self) -> 'HTTPClient':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close_connection()
