"""
Quick note parsing service.
Turns free text into validated transactions via the extraction provider.
"""
from typing import Optional

from core.config import get_settings
from core.exceptions import InvalidInputError
from core.logger import setup_logger
from core.normalize import normalize_candidates
from core.schema import ParseRequest, ParseResult
from llm.client import ExtractionProviderClient, get_client

logger = setup_logger(__name__)


class NoteIngestService:
    """Stateless parser: one provider exchange per call, no shared state."""

    def __init__(
        self,
        client: Optional[ExtractionProviderClient] = None,
        default_category: Optional[str] = None
    ):
        """
        Initialize note ingest service.

        Args:
            client: Provider client (defaults to the shared client)
            default_category: Label for candidates without a category
        """
        self.settings = get_settings()
        self.client = client
        self.default_category = default_category or self.settings.default_category_label

    def parse(self, request: ParseRequest) -> ParseResult:
        """
        Parse note text into accepted transactions.

        Args:
            request: Text plus the user's category and account names

        Returns:
            ParseResult with accepted transactions in provider order

        Raises:
            InvalidInputError: If the text is blank
            ProviderTimeoutError: If the provider exceeds the time budget
            ProviderError: If the provider fails or is unreachable
        """
        if not request.raw_text or not request.raw_text.strip():
            raise InvalidInputError("Text is required")

        client = self.client or get_client()
        body = client.extract(request)

        accepted = normalize_candidates(body, self.default_category)
        logger.info(f"Parsed {len(accepted)} valid transactions")

        return ParseResult(accepted=accepted, source_text=request.raw_text)
