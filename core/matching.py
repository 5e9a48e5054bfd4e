"""
Matching of AI-suggested labels against the user's own names.
Uses exact case-insensitive comparison first, Levenshtein similarity second.

Also learns a category for a new transaction from the descriptions of
past transactions of the same kind.
"""
from typing import Iterable, List, Optional, Sequence

import Levenshtein

from core.config import get_settings
from core.logger import setup_logger
from core.schema import CategoryKind, CategoryRef, HistoryEntry

logger = setup_logger(__name__)

# Only the most recent entries are scanned when learning categories
HISTORY_SCAN_LIMIT = 500

# Bonus when one description contains the other
CONTAINMENT_BONUS = 5


def normalize_string(text: Optional[str]) -> str:
    """
    Normalize string for matching: lowercase, trim, remove extra spaces.

    Args:
        text: Input string

    Returns:
        Normalized string
    """
    if not text or not isinstance(text, str):
        return ""

    return " ".join(text.lower().strip().split())


def calculate_similarity(s1: str, s2: str) -> float:
    """
    Calculate Levenshtein similarity ratio between two strings.

    Args:
        s1: First string
        s2: Second string

    Returns:
        Similarity score (0.0 to 1.0)
    """
    s1_norm = normalize_string(s1)
    s2_norm = normalize_string(s2)

    if not s1_norm or not s2_norm:
        return 0.0

    return Levenshtein.ratio(s1_norm, s2_norm)


def resolve_name(
    label: Optional[str],
    known_names: Iterable[str],
    threshold: Optional[float] = None
) -> Optional[str]:
    """
    Resolve a free-form label to one of the user's names.

    Args:
        label: Label suggested by the provider
        known_names: Names the user actually has
        threshold: Minimum similarity for a fuzzy match

    Returns:
        The matching known name (in its own spelling), or None
    """
    label_norm = normalize_string(label)
    if not label_norm:
        return None

    names = [name for name in known_names if normalize_string(name)]

    for name in names:
        if normalize_string(name) == label_norm:
            return name

    if threshold is None:
        threshold = get_settings().fuzzy_match_threshold

    best_name = None
    best_score = 0.0
    for name in names:
        score = calculate_similarity(label_norm, name)
        if score > best_score:
            best_name, best_score = name, score

    if best_name is not None and best_score >= threshold:
        logger.debug(f"Fuzzy matched '{label}' -> '{best_name}' (score={best_score:.2f})")
        return best_name

    return None


def _score_description(keywords: List[str], description: str, old_description: str) -> int:
    score = sum(1 for keyword in keywords if keyword in old_description)
    if old_description in description or description in old_description:
        score += CONTAINMENT_BONUS
    return score


def learn_category_from_history(
    description: Optional[str],
    suggested_category: str,
    kind: CategoryKind,
    history: Sequence[HistoryEntry],
    categories: Sequence[CategoryRef],
    default_category: Optional[str] = None
) -> str:
    """
    Pick a category from past transactions with similar descriptions.

    Args:
        description: Description of the new transaction
        suggested_category: Category suggested by the provider
        kind: "income" or "expense"
        history: Past transactions, most recent first
        categories: The user's categories
        default_category: The catch-all label, never learned

    Returns:
        The learned category name, or the suggestion when nothing better exists
    """
    lower_desc = (description or "").lower().strip()
    keywords = [word for word in lower_desc.split() if len(word) > 1]
    if not keywords:
        return suggested_category

    if default_category is None:
        default_category = get_settings().default_category_label

    candidates = [
        entry for entry in history
        if entry.kind == kind and entry.description
    ][:HISTORY_SCAN_LIMIT]

    best_category = None
    max_score = 0
    for entry in candidates:
        score = _score_description(keywords, lower_desc, entry.description.lower())
        if score > max_score and entry.category_name:
            max_score = score
            best_category = entry.category_name

    if (
        best_category
        and max_score >= 1
        and best_category.lower() != default_category.lower()
        and any(c.name == best_category and c.kind == kind for c in categories)
    ):
        logger.debug(f"Learned category '{best_category}' for '{description}' (score={max_score})")
        return best_category

    return suggested_category
