from dataclasses import dataclass, field
from enum import Enum


class IssueType(str, Enum):
    """Kind of deck construction problem."""

    FORMAT_LEGALITY = "format_legality"
    SET_LEGALITY = "set_legality"
    BANNED = "banned"
    COPY_LIMIT = "copy_limit"
    MISSING_COMMANDER = "missing_commander"
    TOO_MANY_COMMANDERS = "too_many_commanders"
    PARTNER_MISMATCH = "partner_mismatch"
    MISSING_SIGNATURE_SPELL = "missing_signature_spell"
    DECK_SIZE = "deck_size"
    SIDEBOARD_SIZE = "sideboard_size"
    MISSING_CARD_DATA = "missing_card_data"


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One error or warning, optionally tied to a card."""

    type: IssueType
    message: str
    card_id: str | None = None


@dataclass
class ValidationResult:
    """
    Outcome of validating a deck against its format.

    Derived on demand, never persisted. `evaluated` is False when the
    collection has no rules to check (not a deck, or deck type OTHER).
    """

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    evaluated: bool = True
    format_name: str | None = None

    @property
    def valid(self) -> bool:
        return not self.errors

    def error(self, issue_type: IssueType, message: str, card_id: str | None = None) -> None:
        self.errors.append(ValidationIssue(type=issue_type, message=message, card_id=card_id))

    def warn(self, issue_type: IssueType, message: str, card_id: str | None = None) -> None:
        self.warnings.append(ValidationIssue(type=issue_type, message=message, card_id=card_id))
