# verb_flow/auto_add.py
"""
Turns a good review of a verb card into a new conjugation card pair.

After a Good or Easy grade, one random conjugation form of the verb that the
deck does not have yet is added in both directions. Limits: once per verb per
day, and `max_conjugation_cards_per_day` across all verbs.
"""
import logging
import random
import sqlite3
import uuid
from datetime import datetime
from typing import List, NamedTuple, Optional

from verb_flow import crud
from verb_flow.conjugation_lookup import ConjugationLookup, resolve_verb_data
from verb_flow.database import transaction
from verb_flow.deduplication import remove_accents
from verb_flow.exceptions import EntityNotFoundError
from verb_flow.models import (
    AutoAddReason, AutoAddResult, Card, CardCreate, Deck, VerbData, day_label,
)
from verb_flow.reflexive import format_reflexive_form
from verb_flow.srs_algorithm import GOOD, learning_review_state

logger = logging.getLogger(__name__)


class EligibleConjugation(NamedTuple):
    tense_id: str
    tense_name: str
    person: str
    form: str
    mini_translation: str


def get_eligible_conjugations(
    db: sqlite3.Connection,
    verb_data: VerbData,
    deck: Deck,
    existing_cards: List[Card]
) -> List[EligibleConjugation]:
    """Forms of enabled tenses that were never auto-added and are not already cards."""
    checklist = deck.construct_checklist
    added_forms = {
        (a.tense_id, a.person)
        for a in crud.get_auto_adds_for_verb(db, deck.id, verb_data.infinitive)
    }
    # Both text fields: imported cards keep the target text in back_text regardless of direction
    existing_texts = set()
    for card in existing_cards:
        existing_texts.add(remove_accents(card.front_text))
        existing_texts.add(remove_accents(card.back_text))

    eligible = []
    for tense in verb_data.tenses:
        if not checklist.get(tense.tense_id, False):
            continue
        for conj in tense.conjugations:
            if (tense.tense_id, conj.person) in added_forms:
                continue
            if not conj.form.strip():
                continue
            card_form = format_reflexive_form(conj.form, conj.person, verb_data.infinitive, tense.tense_id)
            if remove_accents(card_form) in existing_texts:
                continue
            eligible.append(EligibleConjugation(
                tense_id=tense.tense_id,
                tense_name=tense.tense_name,
                person=conj.person,
                form=card_form,
                mini_translation=conj.mini_translation,
            ))
    return eligible


def maybe_auto_add_conjugation_card(
    db: sqlite3.Connection,
    card: Card,
    grade: int,
    deck: Deck,
    lookup: ConjugationLookup,
    now: Optional[datetime] = None,
    rng=None
) -> AutoAddResult:
    """
    Attempts to add one conjugation card pair after `card` was graded.
    Returns what was added, or the reason nothing was.
    """
    if grade < GOOD:
        return AutoAddResult(added=False, reason=AutoAddReason.GRADE_TOO_LOW)

    now = now or datetime.now()
    rng = rng or random
    today = day_label(now)

    with transaction(db):
        # Counters may have moved since the caller read the deck
        deck_id = deck.id
        deck = crud.get_deck(db, deck_id)
        if deck is None:
            raise EntityNotFoundError("Deck", deck_id)
        if not deck.auto_add_conjugations:
            return AutoAddResult(added=False, reason=AutoAddReason.DISABLED)

        verb_data = resolve_verb_data(db, card, lookup)
        if verb_data is None or not verb_data.tenses:
            return AutoAddResult(added=False, reason=AutoAddReason.NOT_A_VERB)

        added_today = deck.conjugation_cards_added_today
        if deck.last_conjugation_card_date != today:
            added_today = 0
        if added_today >= deck.max_conjugation_cards_per_day:
            return AutoAddResult(added=False, reason=AutoAddReason.DAILY_LIMIT)

        if crud.count_auto_adds_for_verb_on_day(db, deck.id, verb_data.infinitive, today) > 0:
            return AutoAddResult(added=False, reason=AutoAddReason.VERB_ALREADY_ADDED_TODAY)

        existing_cards = crud.get_all_cards_in_deck(db, deck.id)
        eligible = get_eligible_conjugations(db, verb_data, deck, existing_cards)
        if not eligible:
            return AutoAddResult(added=False, reason=AutoAddReason.ALL_FORMS_ADDED)

        pick = rng.choice(eligible)
        # front_text of the reviewed card is the source-language meaning of the verb
        translation = pick.mini_translation or f"{card.front_text} ({pick.person}, {pick.tense_name.lower()})"
        tags = [verb_data.infinitive, pick.tense_name.lower()]
        pair_id = uuid.uuid4().hex

        for direction in ('source-to-target', 'target-to-source'):
            new_card = CardCreate(
                deck_id=deck.id,
                front_text=translation,
                back_text=pick.form,
                direction=direction,
                tags=tags,
                source='auto-conjugation',
                pair_id=pair_id,
            )
            crud.create_card(db, new_card, learning_review_state(now), now)

        crud.create_auto_add(db, deck.id, verb_data.infinitive, pick.tense_id, pick.person, pick.form, today, now)
        crud.update_deck_conjugation_counter(db, deck.id, added_today + 1, today)

    logger.info("Auto-added %r (%s, %s) for %s in deck %s",
                pick.form, pick.tense_id, pick.person, verb_data.infinitive, deck.id)
    return AutoAddResult(added=True, form=pick.form, translation=translation)
