"""
Processing of saved quick notes.
Runs a note through the parser, then resolves labels against the user's
own accounts and categories so the result can be persisted directly.
"""
from typing import List, Optional, Sequence

from core.exceptions import NoteIngestException
from core.logger import setup_logger, truncate_for_log
from core.matching import learn_category_from_history, resolve_name
from core.schema import HistoryEntry, NoteCatalog, NoteOutcome, ParsedTransaction, QuickNote
from services.note_service import NoteIngestService

logger = setup_logger(__name__)

NO_TRANSACTIONS_FOUND = "AI không tìm thấy giao dịch hợp lệ"
NO_TRANSACTIONS_CREATED = "Không tạo được giao dịch từ dữ liệu AI"


class NoteProcessor:
    """Turns one quick note into transactions ready for persistence."""

    def __init__(self, service: Optional[NoteIngestService] = None):
        self.service = service or NoteIngestService()

    def process(
        self,
        raw_text: str,
        catalog: NoteCatalog,
        history: Sequence[HistoryEntry] = ()
    ) -> NoteOutcome:
        """
        Process a quick note.

        Request-level failures are reported in the outcome, not raised.

        Args:
            raw_text: The note text
            catalog: The user's categories and accounts
            history: Past transactions, most recent first

        Returns:
            NoteOutcome with status "success" and parsed transactions,
            or status "error" with a message
        """
        text = (raw_text or "").strip()
        logger.info(f"Processing note: {truncate_for_log(text)}")

        try:
            result = self.service.parse(catalog.to_parse_request(text))
        except NoteIngestException as e:
            logger.error(f"Note processing failed: {e.message}")
            return NoteOutcome(status="error", error_message=e.message)

        if not result.accepted:
            return NoteOutcome(status="error", error_message=NO_TRANSACTIONS_FOUND)

        parsed: List[ParsedTransaction] = []
        for txn in result.accepted:
            description = txn.description or text
            learn_kind = "income" if txn.kind == "income" else "expense"
            category = learn_category_from_history(
                description,
                txn.category_label,
                learn_kind,
                history,
                catalog.categories,
                default_category=self.service.default_category,
            )

            account = resolve_name(txn.account_label, catalog.accounts)
            if account is None and catalog.accounts:
                account = catalog.accounts[0]
            if account is None:
                logger.warning("No account found for transaction")
                continue

            to_account = None
            if txn.transfer_to_account_label:
                to_account = resolve_name(txn.transfer_to_account_label, catalog.accounts)

            parsed.append(ParsedTransaction(
                kind=txn.kind,
                amount=txn.amount,
                description=description,
                suggested_category=category,
                account_label=account,
                to_account_label=to_account,
                occurred_at=txn.occurred_at,
            ))

        if not parsed:
            return NoteOutcome(status="error", error_message=NO_TRANSACTIONS_CREATED)

        logger.info(f"Note produced {len(parsed)} transactions")
        return NoteOutcome(status="success", parsed_data=parsed)

    def process_note(
        self,
        note: QuickNote,
        catalog: NoteCatalog,
        history: Sequence[HistoryEntry] = ()
    ) -> QuickNote:
        """
        Process a saved note unless it already succeeded.

        Returns:
            The note with updated status, or the note unchanged when its
            status is already "success"
        """
        if note.status == "success":
            logger.debug(f"Skipping note {note.id}: already processed")
            return note

        outcome = self.process(note.raw_text, catalog, history)
        return note.with_outcome(outcome)

    def process_pending(
        self,
        notes: Sequence[QuickNote],
        catalog: NoteCatalog,
        history: Sequence[HistoryEntry] = ()
    ) -> List[QuickNote]:
        """
        Process every pending or failed note, one after another.

        Args:
            notes: Saved notes in display order
            catalog: The user's categories and accounts
            history: Past transactions, most recent first

        Returns:
            The processed notes, updated, in the order given
        """
        pending = [note for note in notes if note.status in ("pending", "error")]
        if not pending:
            logger.info("No notes need processing")
            return []

        processed = [self.process_note(note, catalog, history) for note in pending]

        succeeded = sum(1 for note in processed if note.status == "success")
        logger.info(f"Processed {len(processed)} notes: {succeeded} succeeded")
        return processed
