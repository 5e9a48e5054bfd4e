"""
Normalization of provider output into trusted transactions.
Malformed candidates are dropped here and never surface as errors.
"""
from typing import Any, Dict, List, Optional

from core.config import get_settings
from core.logger import setup_logger
from core.schema import NormalizedTransaction, RawCandidate, TransactionKind

logger = setup_logger(__name__)

# Provider type labels (Vietnamese and English), compared case-insensitively
KIND_ALIASES: Dict[str, TransactionKind] = {
    "thu": "income",
    "income": "income",
    "chi": "expense",
    "expense": "expense",
    "transfer": "transfer",
    "chuyển": "transfer",
    "chuyển khoản": "transfer",
}

DEFAULT_KIND: TransactionKind = "expense"


def map_kind(raw_type: Optional[str]) -> TransactionKind:
    """
    Map a provider type label to a transaction kind.

    Unknown or missing labels are treated as spending.

    Args:
        raw_type: Type label as decoded from the provider

    Returns:
        "income", "expense" or "transfer"
    """
    if not raw_type:
        return DEFAULT_KIND
    return KIND_ALIASES.get(" ".join(raw_type.casefold().split()), DEFAULT_KIND)


def extract_candidates(body: Any) -> List[Any]:
    """
    Locate the candidate sequence in a provider response body.

    Args:
        body: Parsed JSON body

    Returns:
        body["transactions"] when it is a list, body itself when it is a list,
        otherwise an empty list
    """
    if isinstance(body, dict) and isinstance(body.get("transactions"), list):
        return body["transactions"]
    if isinstance(body, list):
        return body
    logger.warning(f"Provider response has no transaction list (type={type(body).__name__})")
    return []


def normalize_candidate(
    item: Any,
    default_category: Optional[str] = None
) -> Optional[NormalizedTransaction]:
    """
    Validate and normalize a single raw candidate.

    Args:
        item: One untrusted item from the provider's candidate list
        default_category: Label used when the category is missing

    Returns:
        NormalizedTransaction, or None when the candidate is rejected
    """
    candidate = RawCandidate.decode(item)
    if candidate is None:
        logger.debug(f"Dropping non-object candidate: {item!r}")
        return None

    if candidate.amount is None or candidate.amount <= 0:
        logger.debug(f"Dropping candidate with invalid amount: {item!r}")
        return None

    if default_category is None:
        default_category = get_settings().default_category_label

    return NormalizedTransaction(
        kind=map_kind(candidate.type),
        amount=candidate.amount,
        category_label=candidate.category or default_category,
        account_label=candidate.account or "",
        description=candidate.description or "",
        occurred_at=candidate.datetime,
        transfer_to_account_label=candidate.to_account,
    )


def normalize_candidates(
    body: Any,
    default_category: Optional[str] = None
) -> List[NormalizedTransaction]:
    """
    Normalize every candidate in a provider response, preserving order.

    Args:
        body: Parsed JSON body of the provider response
        default_category: Label used when a category is missing

    Returns:
        Accepted transactions in the provider's order
    """
    items = extract_candidates(body)
    accepted = []
    for item in items:
        txn = normalize_candidate(item, default_category)
        if txn is not None:
            accepted.append(txn)

    logger.info(f"Normalized candidates: {len(items)} -> {len(accepted)} accepted")
    return accepted
