"""
Id-keyed merge of card collections.

Cards are matched by the JSON-text form of ``card["id"]``: numbers that are
equal in JSON (``1`` and ``1.0``) share a key, booleans key as ``"true"`` and
``"false"``, and ids of different types that print the same (``1`` and
``"1"``) match. A matching incoming card is laid over the existing one field
by field (shallow; nested values are replaced, not merged). Unknown ids are
appended in incoming order.

Cards without an id, and entries that are not mappings, never make it into
the result. Callers that upsert through this function therefore drop any
anonymous cards already stored.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Optional


# Floats at or above this magnitude print in exponent form in JSON clients
_EXPONENT_THRESHOLD = 1e21


def _id_text(card_id: Any) -> str:
    if isinstance(card_id, bool):
        return "true" if card_id else "false"
    if isinstance(card_id, float) and card_id.is_integer() and abs(card_id) < _EXPONENT_THRESHOLD:
        return str(int(card_id))
    return str(card_id)


def card_key(card: Any) -> Optional[str]:
    """Return the merge identity of a card, or None if it is anonymous."""
    if not isinstance(card, Mapping):
        return None
    card_id = card.get("id")
    if card_id is None:
        return None
    return _id_text(card_id)


def merge_cards_by_id(
    current: Iterable[Any],
    incoming: Iterable[Any],
) -> list[dict[str, Any]]:
    """
    Merge ``incoming`` cards into ``current``.

    Existing ids keep their relative order, new ids follow in the order
    they first appear in ``incoming``. Neither input is mutated.
    """
    merged: dict[str, dict[str, Any]] = {}

    for card in current:
        key = card_key(card)
        if key is not None:
            merged[key] = dict(card)

    for card in incoming:
        key = card_key(card)
        if key is None:
            continue
        existing = merged.get(key)
        if existing is None:
            merged[key] = dict(card)
        else:
            existing.update(card)

    return list(merged.values())
