"""
Deck construction validation.

Evaluates a deck's entries against its format rule and reports errors and
warnings. Every check runs independently; one failing card never hides
problems found by the other checks. The validator never raises and
performs no ownership checks.

Commander color identity is not cross-checked against the deck.
"""

import logging
from collections import defaultdict
from collections.abc import Mapping, Sequence

from manavault.models.card import CatalogCard
from manavault.models.collection import Collection, CollectionEntry, DeckType
from manavault.models.format_rules import (
    FormatRule,
    are_partners_compatible,
    get_format_rule,
    is_basic_land,
)
from manavault.models.validation import IssueType, ValidationResult

logger = logging.getLogger(__name__)

LEGAL_STATUSES = frozenset({"legal", "restricted"})


def _is_exempt(rule: FormatRule, card: CatalogCard) -> bool:
    return rule.basic_land_exempt and is_basic_land(card.name)


def _check_legality(
    rule: FormatRule,
    entries: Sequence[CollectionEntry],
    cards: Mapping[str, CatalogCard],
    result: ValidationResult,
) -> None:
    seen: set[str] = set()

    for entry in entries:
        card = cards.get(entry.scryfall_id)
        if card is None or card.id in seen or _is_exempt(rule, card):
            continue
        seen.add(card.id)

        if rule.legality_key:
            if card.legality(rule.legality_key) not in LEGAL_STATUSES:
                result.error(
                    IssueType.FORMAT_LEGALITY,
                    f"{card.name} is not legal in {rule.name}",
                    card_id=card.id,
                )
            continue

        if rule.uses_set_legality:
            if rule.legal_sets and card.set_code not in rule.legal_sets:
                result.error(
                    IssueType.SET_LEGALITY,
                    f"{card.name} ({card.set_code.upper()}) is not from a {rule.name} legal set",
                    card_id=card.id,
                )
            if card.name in rule.banned_cards:
                result.error(
                    IssueType.BANNED,
                    f"{card.name} is banned in {rule.name}",
                    card_id=card.id,
                )


def _check_copy_limits(
    rule: FormatRule,
    entries: Sequence[CollectionEntry],
    cards: Mapping[str, CatalogCard],
    result: ValidationResult,
) -> None:
    limit = rule.copy_limit
    if limit is None:
        return

    # Distinct printings of one name count together
    copies: dict[str, int] = defaultdict(int)
    first_id: dict[str, str] = {}
    for entry in entries:
        card = cards.get(entry.scryfall_id)
        if card is None or _is_exempt(rule, card):
            continue
        copies[card.name] += entry.quantity
        first_id.setdefault(card.name, card.id)

    for name, count in copies.items():
        if count > limit:
            plural = "copy" if limit == 1 else "copies"
            result.error(
                IssueType.COPY_LIMIT,
                f"{name}: {count} copies exceeds the limit of {limit} {plural} in {rule.name}",
                card_id=first_id[name],
            )


def _check_commanders(
    rule: FormatRule,
    entries: Sequence[CollectionEntry],
    cards: Mapping[str, CatalogCard],
    result: ValidationResult,
) -> None:
    if not rule.requires_commander:
        return

    label = rule.commander_label or "Commander"
    commanders = [entry for entry in entries if entry.is_commander]
    if not commanders:
        result.error(IssueType.MISSING_COMMANDER, f"{rule.name} decks require a {label}")
        return

    commander_count = sum(entry.quantity for entry in commanders)
    if rule.max_commanders is not None and commander_count > rule.max_commanders:
        result.error(
            IssueType.TOO_MANY_COMMANDERS,
            f"{rule.name} allows at most {rule.max_commanders} {label}(s), found {commander_count}",
        )
        return

    if len(commanders) == 2:
        first, second = (cards.get(entry.scryfall_id) for entry in commanders)
        if first is not None and second is not None:
            if not are_partners_compatible(_partner_fields(first), _partner_fields(second)):
                result.warn(
                    IssueType.PARTNER_MISMATCH,
                    f"{first.name} and {second.name} cannot be paired as commanders",
                    card_id=second.id,
                )


def _partner_fields(card: CatalogCard) -> dict[str, str]:
    return {"name": card.name, "oracle_text": card.oracle_text, "type_line": card.type_line}


def _check_signature_spell(
    rule: FormatRule, entries: Sequence[CollectionEntry], result: ValidationResult
) -> None:
    # Instant/Sorcery type of the signature spell is not checked
    if rule.requires_signature_spell and not any(e.is_signature_spell for e in entries):
        result.error(
            IssueType.MISSING_SIGNATURE_SPELL,
            f"{rule.name} decks require a Signature Spell",
        )


def _check_deck_size(
    rule: FormatRule, entries: Sequence[CollectionEntry], result: ValidationResult
) -> None:
    main_count = sum(entry.quantity for entry in entries if not entry.is_sideboard)

    if rule.min_deck_size is not None and rule.min_deck_size == rule.max_deck_size:
        if main_count != rule.min_deck_size:
            result.error(
                IssueType.DECK_SIZE,
                f"{rule.name} decks must contain exactly {rule.min_deck_size} cards "
                f"(currently {main_count})",
            )
        return

    if rule.min_deck_size is not None and main_count < rule.min_deck_size:
        result.error(
            IssueType.DECK_SIZE,
            f"{rule.name} decks must contain at least {rule.min_deck_size} cards "
            f"(currently {main_count})",
        )
    if rule.max_deck_size is not None and main_count > rule.max_deck_size:
        result.error(
            IssueType.DECK_SIZE,
            f"{rule.name} decks may contain at most {rule.max_deck_size} cards "
            f"(currently {main_count})",
        )


def _check_sideboard(
    rule: FormatRule, entries: Sequence[CollectionEntry], result: ValidationResult
) -> None:
    if rule.sideboard_size is None:
        return
    side_count = sum(entry.quantity for entry in entries if entry.is_sideboard)
    if side_count <= rule.sideboard_size:
        return
    if rule.sideboard_size == 0:
        message = f"{rule.name} decks do not use a sideboard ({side_count} cards found)"
    else:
        message = (
            f"Sideboard has {side_count} cards; {rule.name} allows at most {rule.sideboard_size}"
        )
    result.warn(IssueType.SIDEBOARD_SIZE, message)


def validate_deck(
    collection: Collection,
    entries: Sequence[CollectionEntry],
    cards: Mapping[str, CatalogCard],
) -> ValidationResult:
    """
    Validate a deck against its format rule.

    Collections that are not decks, and decks of type OTHER, are not
    evaluated: the result has evaluated=False and no issues.

    Args:
        collection: The collection being validated
        entries: All of its entries
        cards: Catalog data by Scryfall ID; missing IDs produce warnings

    Returns:
        ValidationResult with errors and warnings
    """
    if not collection.is_deck or collection.deck_type in (None, DeckType.OTHER):
        return ValidationResult(evaluated=False)

    rule = get_format_rule(collection.deck_type)
    result = ValidationResult(format_name=rule.name)

    for entry in entries:
        if entry.scryfall_id not in cards:
            result.warn(
                IssueType.MISSING_CARD_DATA,
                "Card data unavailable; legality could not be checked",
                card_id=entry.scryfall_id,
            )

    _check_legality(rule, entries, cards, result)
    _check_copy_limits(rule, entries, cards, result)
    _check_commanders(rule, entries, cards, result)
    _check_signature_spell(rule, entries, result)
    _check_deck_size(rule, entries, result)
    _check_sideboard(rule, entries, result)

    logger.debug(
        "Validated collection %d as %s: %d error(s), %d warning(s)",
        collection.id,
        rule.name,
        len(result.errors),
        len(result.warnings),
    )
    return result
