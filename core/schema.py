"""
Pydantic schemas for request/response validation.
Provider output is decoded through RawCandidate, whose field validators
never raise: every malformed field collapses to None.
"""
import math
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, List, Literal, Optional, Tuple

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
)

TransactionKind = Literal["income", "expense", "transfer"]
CategoryKind = Literal["income", "expense"]
NoteStatus = Literal["pending", "success", "error"]

# Largest integer a JSON number (IEEE double) holds exactly
MAX_EXACT_INTEGER = 2 ** 53


def normalize_optional_text(v: Any) -> Optional[str]:
    """Decode an untrusted scalar into stripped text, or None."""
    if isinstance(v, bool) or v is None:
        return None
    if isinstance(v, (int, float, Decimal)):
        return str(v)
    if isinstance(v, str):
        return v.strip() or None
    return None


def normalize_amount(v: Any) -> Optional[Decimal]:
    """
    Decode an untrusted amount into a finite Decimal.

    Accepts numbers and numeric strings. Booleans, containers and anything
    that does not parse as a finite number become None, as do values a
    JSON number cannot carry (overflow to infinity, non-zero underflow to 0).
    """
    if isinstance(v, bool) or v is None:
        return None
    if not isinstance(v, (int, float, Decimal, str)):
        return None

    try:
        amount = Decimal(v.strip() if isinstance(v, str) else str(v))
    except (InvalidOperation, ValueError):
        return None

    if not amount.is_finite():
        return None

    as_float = float(amount)
    if math.isinf(as_float) or (as_float == 0 and amount != 0):
        return None
    return amount


def normalize_name_list(v: Any) -> Tuple[str, ...]:
    """De-duplicate a list of names, keeping first-seen order."""
    if v is None:
        return ()
    if not isinstance(v, (list, tuple)):
        raise ValueError("Expected a list of names")

    seen = set()
    names = []
    for item in v:
        if not isinstance(item, str):
            continue
        name = item.strip()
        if name and name not in seen:
            seen.add(name)
            names.append(name)
    return tuple(names)


def normalize_list(v: Any) -> Any:
    """Treat a null list from the client as empty."""
    if v is None:
        return []
    return v


NameList = Annotated[Tuple[str, ...], BeforeValidator(normalize_name_list)]
OptionalText = Annotated[Optional[str], BeforeValidator(normalize_optional_text)]


class ParseRequest(BaseModel):
    """Free text plus the user's known names, sent once per user action."""
    model_config = ConfigDict(frozen=True)

    raw_text: str
    income_category_names: NameList = ()
    expense_category_names: NameList = ()
    account_names: NameList = ()

    def to_provider_payload(self) -> dict:
        """Build the JSON body the extraction provider expects."""
        return {
            "userInput": self.raw_text,
            "incomeCategories": list(self.income_category_names),
            "expenseCategories": list(self.expense_category_names),
            "accounts": list(self.account_names),
        }


class RawCandidate(BaseModel):
    """One untrusted transaction-shaped record from the provider."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: OptionalText = None
    amount: Annotated[Optional[Decimal], BeforeValidator(normalize_amount)] = None
    category: OptionalText = None
    account: OptionalText = None
    description: OptionalText = None
    datetime: OptionalText = None
    to_account: OptionalText = Field(default=None, alias="toAccount")

    @classmethod
    def decode(cls, value: Any) -> Optional["RawCandidate"]:
        """Decode a raw provider item; returns None for non-object items."""
        if not isinstance(value, dict):
            return None
        try:
            return cls.model_validate(value)
        except ValidationError:
            return None


class NormalizedTransaction(BaseModel):
    """A candidate that passed validation, safe to display or persist."""
    model_config = ConfigDict(frozen=True)

    kind: TransactionKind
    amount: Decimal = Field(..., gt=0)
    category_label: str
    account_label: str = ""
    description: str = ""
    occurred_at: Optional[str] = None
    transfer_to_account_label: Optional[str] = None


class ParseResult(BaseModel):
    """Accepted transactions in provider order, plus the text they came from."""
    accepted: List[NormalizedTransaction] = Field(default_factory=list)
    source_text: str


# Wire models for the HTTP API


class ParseNoteRequest(BaseModel):
    """Body of POST /parse-note."""
    text: str = ""
    income_categories: Annotated[List[str], BeforeValidator(normalize_list)] = Field(
        default_factory=list, alias="incomeCategories"
    )
    expense_categories: Annotated[List[str], BeforeValidator(normalize_list)] = Field(
        default_factory=list, alias="expenseCategories"
    )
    accounts: Annotated[List[str], BeforeValidator(normalize_list)] = Field(default_factory=list)

    def to_parse_request(self) -> ParseRequest:
        return ParseRequest(
            raw_text=self.text,
            income_category_names=self.income_categories,
            expense_category_names=self.expense_categories,
            account_names=self.accounts,
        )


class TransactionOut(BaseModel):
    """Accepted transaction as returned to API callers."""
    model_config = ConfigDict(populate_by_name=True)

    type: TransactionKind
    amount: Decimal
    category: str
    account: str
    description: str
    datetime: Optional[str] = None
    to_account: Optional[str] = Field(default=None, alias="toAccount")

    @field_serializer("amount")
    def serialize_amount(self, amount: Decimal):
        """Emit amounts as JSON numbers; integers only where a float is exact."""
        if amount == amount.to_integral_value() and abs(amount) <= MAX_EXACT_INTEGER:
            return int(amount)
        return float(amount)

    @classmethod
    def from_normalized(cls, txn: NormalizedTransaction) -> "TransactionOut":
        return cls(
            type=txn.kind,
            amount=txn.amount,
            category=txn.category_label,
            account=txn.account_label,
            description=txn.description,
            datetime=txn.occurred_at,
            to_account=txn.transfer_to_account_label,
        )


class ParseNoteResponse(BaseModel):
    """Successful response of POST /parse-note."""
    success: bool = True
    transactions: List[TransactionOut] = Field(default_factory=list)
    raw_text: str

    @classmethod
    def from_result(cls, result: ParseResult) -> "ParseNoteResponse":
        return cls(
            transactions=[TransactionOut.from_normalized(t) for t in result.accepted],
            raw_text=result.source_text,
        )


class ErrorResponse(BaseModel):
    error: str


# Quick note processing


class CategoryRef(BaseModel):
    """A category the user owns."""
    name: str
    kind: CategoryKind


class HistoryEntry(BaseModel):
    """A past transaction, used to learn categories from descriptions."""
    kind: TransactionKind
    description: str = ""
    category_name: Optional[str] = None


class NoteCatalog(BaseModel):
    """The user's categories and accounts at the time a note is processed."""
    categories: List[CategoryRef] = Field(default_factory=list)
    accounts: List[str] = Field(default_factory=list)

    def category_names(self, kind: CategoryKind) -> List[str]:
        return [c.name for c in self.categories if c.kind == kind]

    def to_parse_request(self, raw_text: str) -> ParseRequest:
        return ParseRequest(
            raw_text=raw_text,
            income_category_names=self.category_names("income"),
            expense_category_names=self.category_names("expense"),
            account_names=self.accounts,
        )


class ParsedTransaction(BaseModel):
    """A transaction ready to hand over to persistence."""
    kind: TransactionKind
    amount: Decimal
    description: str
    suggested_category: str
    account_label: str
    to_account_label: Optional[str] = None
    occurred_at: Optional[str] = None


class NoteOutcome(BaseModel):
    """Result of processing one quick note."""
    status: Literal["success", "error"]
    parsed_data: List[ParsedTransaction] = Field(default_factory=list)
    error_message: Optional[str] = None


class QuickNote(BaseModel):
    """A saved free-text note; starts pending and ends in success or error."""
    id: str
    raw_text: str
    status: NoteStatus = "pending"
    parsed_data: Optional[List[ParsedTransaction]] = None
    error_message: Optional[str] = None

    def with_outcome(self, outcome: NoteOutcome) -> "QuickNote":
        """Return a copy of the note reflecting a processing outcome."""
        return self.model_copy(update={
            "status": outcome.status,
            "parsed_data": outcome.parsed_data if outcome.status == "success" else self.parsed_data,
            "error_message": outcome.error_message,
        })
