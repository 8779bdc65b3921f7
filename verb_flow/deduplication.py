# verb_flow/deduplication.py

import sqlite3
import unicodedata
from typing import List

from verb_flow import crud
from verb_flow.models import Card


def remove_accents(text: str) -> str:
    """Lowercase, trimmed, with combining marks dropped (está -> esta, ñ -> n)."""
    decomposed = unicodedata.normalize('NFD', text.strip())
    stripped = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def equal_ignoring_accents(a: str, b: str) -> bool:
    return remove_accents(a) == remove_accents(b)


def check_duplicate(db: sqlite3.Connection, deck_id: int, target_text: str) -> List[Card]:
    """Cards in the deck whose target-language side matches `target_text`."""
    if not target_text.strip():
        return []
    key = remove_accents(target_text)
    return [
        card for card in crud.get_all_cards_in_deck(db, deck_id)
        if remove_accents(card.target_text) == key
    ]
