# verb_flow/conjugation_lookup.py
"""
Static conjugation lookup and the verb-data resolver used by auto-add.

The artifact is a compact JSON file built by build_conjugations.py:
tense metadata once, then per verb a list of form lists aligned to the tense
and person order.
"""
import json
import logging
import sqlite3
from pathlib import Path
from typing import Dict, Optional, Union

from verb_flow import crud
from verb_flow.config import settings
from verb_flow.deduplication import remove_accents
from verb_flow.exceptions import ArtifactUnavailableError
from verb_flow.models import Card, ConjugationForm, TenseData, VerbData

logger = logging.getLogger(__name__)


def _is_string_list(value) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


class ConjugationLookup:
    """
    Lazily loaded view of the static conjugation artifact.

    A failed load is logged and answered with None; the next call tries again.
    """

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path or settings.conjugation_data_path)
        self._data: Optional[dict] = None
        self._folded_index: Dict[str, str] = {}

    @property
    def is_loaded(self) -> bool:
        return self._data is not None

    def _load(self) -> dict:
        if self._data is not None:
            return self._data
        try:
            with self.path.open(encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ArtifactUnavailableError(f"Cannot load conjugation data from {self.path}: {e}") from e
        if (not isinstance(data, dict) or not isinstance(data.get('verbs'), dict)
                or not isinstance(data.get('tenses'), list)):
            raise ArtifactUnavailableError(f"Malformed conjugation data in {self.path}")
        for meta in data['tenses']:
            if (not isinstance(meta, dict) or not isinstance(meta.get('tenseId'), str)
                    or not isinstance(meta.get('tenseName'), str) or not _is_string_list(meta.get('persons'))):
                raise ArtifactUnavailableError(f"Malformed tense record in {self.path}: {meta!r}")
        for infinitive, verb_forms in data['verbs'].items():
            if not isinstance(verb_forms, list) or not all(_is_string_list(forms) for forms in verb_forms):
                raise ArtifactUnavailableError(f"Malformed forms for {infinitive!r} in {self.path}")

        self._folded_index = {}
        for infinitive in data['verbs']:
            self._folded_index.setdefault(remove_accents(infinitive), infinitive)
        self._data = data
        logger.info("Loaded %d verbs from %s", len(data['verbs']), self.path)
        return data

    def _ensure_loaded(self) -> Optional[dict]:
        try:
            return self._load()
        except ArtifactUnavailableError as e:
            logger.warning("Static conjugation lookup unavailable: %s", e)
            return None

    def load(self) -> bool:
        """Reads the artifact now if it is not cached; True when it is available."""
        return self._ensure_loaded() is not None

    def reload(self):
        """Drops the cached artifact; the next lookup reads the file again."""
        self._data = None
        self._folded_index = {}

    def _find_key(self, data: dict, infinitive: str) -> Optional[str]:
        text = infinitive.strip()
        if text in data['verbs']:
            return text
        return self._folded_index.get(remove_accents(text))

    def has(self, infinitive: str) -> bool:
        data = self._ensure_loaded()
        return data is not None and self._find_key(data, infinitive) is not None

    def lookup(self, infinitive: str) -> Optional[VerbData]:
        """Full verb table for an infinitive, or None when it is not in the artifact."""
        if not infinitive or not infinitive.strip():
            return None
        data = self._ensure_loaded()
        if data is None:
            return None
        key = self._find_key(data, infinitive)
        if key is None:
            return None

        verb_forms = data['verbs'][key]
        tenses = []
        for tense_idx, meta in enumerate(data['tenses']):
            forms = verb_forms[tense_idx] if tense_idx < len(verb_forms) else []
            tenses.append(TenseData(
                tense_id=meta['tenseId'],
                tense_name=meta['tenseName'],
                description=meta.get('description', ''),
                conjugations=[
                    ConjugationForm(person=person, form=forms[i] if i < len(forms) else '')
                    for i, person in enumerate(meta['persons'])
                ],
            ))
        return VerbData(infinitive=key, language=data.get('language', 'spanish'), tenses=tenses)


def _has_tenses(verb_data: Optional[VerbData]) -> bool:
    return verb_data is not None and len(verb_data.tenses) > 0


def find_companion_card(db: sqlite3.Connection, card: Card) -> Optional[Card]:
    """
    The other half of a card pair that carries verb data.
    Pairs created together share a pair_id; older cards fall back to matching
    the same text pair in either orientation.
    """
    if card.pair_id:
        candidates = crud.get_cards_by_pair(db, card.deck_id, card.pair_id)
    else:
        candidates = [
            other for other in crud.get_all_cards_in_deck(db, card.deck_id)
            if other.direction != card.direction and (
                (other.front_text == card.front_text and other.back_text == card.back_text)
                or (other.front_text == card.back_text and other.back_text == card.front_text)
            )
        ]
    for other in candidates:
        if other.id != card.id and _has_tenses(other.verb_data):
            return other
    return None


def resolve_verb_data(db: sqlite3.Connection, card: Card, lookup: ConjugationLookup) -> Optional[VerbData]:
    """Card data first, then its companion, then the static artifact."""
    if _has_tenses(card.verb_data):
        return card.verb_data

    companion = find_companion_card(db, card)
    if companion is not None:
        return companion.verb_data

    result = lookup.lookup(card.back_text)
    if result is not None:
        return result
    if card.front_text != card.back_text:
        return lookup.lookup(card.front_text)
    return None
