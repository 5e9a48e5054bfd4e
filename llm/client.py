"""
Client for the external extraction provider (an LLM worker behind HTTP).
Performs one request/response exchange per call; never retries.
"""
import json
import time
from typing import Any, Optional

import requests
import urllib3

from core.config import get_settings
from core.exceptions import ConfigurationError, ProviderError, ProviderTimeoutError
from core.logger import setup_logger, truncate_for_log
from core.schema import ParseRequest

logger = setup_logger(__name__)

READ_CHUNK_SIZE = 8192


class ExtractionProviderClient:
    """Wrapper for the extraction provider REST endpoint."""

    def __init__(self):
        """Initialize REST API client from settings."""
        settings = get_settings()
        if not settings.extraction_provider_url:
            raise ConfigurationError(
                "EXTRACTION_PROVIDER_URL environment variable not set",
                details={"required_key": "EXTRACTION_PROVIDER_URL"}
            )

        self.endpoint_url = settings.extraction_provider_url
        self.api_key = settings.provider_api_key
        self.timeout = settings.provider_timeout
        self.verify_ssl = settings.provider_verify_ssl

        if not self.verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        logger.info(f"Initialized extraction provider client: {self.endpoint_url}, timeout={self.timeout}s")

    def extract(self, request: ParseRequest) -> Any:
        """
        Send note text and hints to the provider.

        Args:
            request: Validated parse request

        Returns:
            Parsed JSON body of the provider response (untrusted)

        Raises:
            ProviderTimeoutError: If the provider exceeds the time budget
            ProviderError: On non-success status, transport failure or non-JSON body
        """
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        logger.info(f"Calling extraction provider with text: {truncate_for_log(request.raw_text)}")

        # The budget covers connecting, waiting and reading the whole body
        deadline = time.monotonic() + self.timeout

        try:
            response = requests.post(
                self.endpoint_url,
                headers=headers,
                json=request.to_provider_payload(),
                verify=self.verify_ssl,
                timeout=self.timeout,
                stream=True
            )
            try:
                content = self._read_body(response, deadline)
            finally:
                response.close()

        except requests.exceptions.Timeout as e:
            logger.error(f"Extraction provider timeout after {self.timeout}s: {e}")
            raise self._timeout_error()

        except requests.exceptions.RequestException as e:
            logger.error(f"Extraction provider request failed: {e}")
            raise ProviderError(
                f"AI error: {str(e)}",
                details={"endpoint_url": self.endpoint_url, "error": str(e)}
            )

        # HTTP errors (4xx, 5xx)
        if response.status_code >= 400:
            response_text = content.decode("utf-8", errors="replace")
            logger.error(f"Extraction provider error: {response.status_code} - {truncate_for_log(response_text, 500)}")
            raise ProviderError(
                f"AI error: {response.status_code}",
                details={
                    "endpoint_url": self.endpoint_url,
                    "status_code": response.status_code,
                    "response_text": response_text,
                }
            )

        try:
            body = json.loads(content)
        except ValueError as e:
            logger.error(f"Extraction provider returned invalid JSON: {e}")
            raise ProviderError(
                "AI error: invalid response",
                details={"endpoint_url": self.endpoint_url, "error": str(e)}
            )

        logger.info(f"Extraction provider response: {truncate_for_log(body, 500)}")
        return body

    def _read_body(self, response: requests.Response, deadline: float) -> bytes:
        """
        Read the streamed response body, giving up at the deadline.

        Raises:
            ProviderTimeoutError: If the deadline passes before the body is complete
        """
        chunks = []
        try:
            for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
                if time.monotonic() > deadline:
                    break
                chunks.append(chunk)
        except requests.exceptions.ConnectionError:
            # A stalled read surfaces as ConnectionError while streaming
            if time.monotonic() > deadline:
                logger.error(f"Extraction provider read stalled past {self.timeout}s")
                raise self._timeout_error()
            raise

        if time.monotonic() > deadline:
            logger.error(f"Extraction provider exceeded {self.timeout}s budget")
            raise self._timeout_error()

        return b"".join(chunks)

    def _timeout_error(self) -> ProviderTimeoutError:
        return ProviderTimeoutError(
            "AI timeout - vui lòng thử lại",
            details={"endpoint_url": self.endpoint_url, "timeout": self.timeout}
        )


# Singleton client instance
_client: Optional[ExtractionProviderClient] = None


def get_client() -> ExtractionProviderClient:
    """
    Get or create extraction provider client singleton.

    Returns:
        Extraction provider client instance
    """
    global _client
    if _client is None:
        _client = ExtractionProviderClient()
    return _client


def reset_client() -> None:
    """Reset client singleton (useful for testing)."""
    global _client
    _client = None
