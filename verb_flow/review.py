# verb_flow/review.py
"""
Card creation, grading and the daily new-card gate.

Each deck admits at most `new_cards_per_day` new cards per calendar day and
hands them out in batches of `new_card_batch_size`; a batch is only replaced
once every card in it has been reviewed. Counters reset lazily the first time
a deck is consulted on a new day.
"""
import logging
import math
import sqlite3
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from verb_flow import crud
from verb_flow.conjugation_lookup import ConjugationLookup
from verb_flow.database import transaction
from verb_flow.exceptions import EntityNotFoundError
from verb_flow.models import Card, CardCreate, CardPairCreate, Deck, ReviewQueue, day_label
from verb_flow.srs_algorithm import (
    VALID_GRADES, learning_review_state, new_review_state, schedule, validate_grade,
)

logger = logging.getLogger(__name__)

DEFAULT_LEARNING_STEPS = "10 1440"
DEFAULT_GRADUATING_INTERVAL = 4

# Sources that charge the daily new-card counter when the card is created.
CHARGED_AT_CREATION = ('manual', 'practice')


def _require_deck(db: sqlite3.Connection, deck_id: int) -> Deck:
    deck = crud.get_deck(db, deck_id)
    if deck is None:
        raise EntityNotFoundError("Deck", deck_id)
    return deck


def get_scheduler_settings(db: sqlite3.Connection, deck: Deck) -> Tuple[List[int], int]:
    """Deck values first, then the global settings rows, then built-in defaults."""
    global_steps_str = crud.get_setting(db, "learning_steps") or DEFAULT_LEARNING_STEPS
    global_grad_interval = int(crud.get_setting(db, "graduating_interval") or DEFAULT_GRADUATING_INTERVAL)
    effective_steps_str = deck.learning_steps or global_steps_str
    effective_grad_interval = deck.graduating_interval or global_grad_interval
    learning_steps = [int(step) for step in effective_steps_str.split()]
    return learning_steps, effective_grad_interval


# --- Daily new-card counter ---

def get_daily_new_card_remaining(db: sqlite3.Connection, deck: Deck, now: Optional[datetime] = None) -> int:
    """
    Slots left today. Manual and practice cards created today were charged at
    creation; while they are still new they hold a slot of their own instead
    of consuming one, so they are subtracted back out.
    """
    now = now or datetime.now()
    today = day_label(now)
    with transaction(db):
        deck = _require_deck(db, deck.id)
        if deck.last_new_card_date != today:
            # New day: reset counter
            crud.update_deck_new_card_counter(db, deck.id, 0, today)
            introduced = 0
        else:
            introduced = deck.new_cards_introduced_today
        reserved = crud.count_reserved_new_cards(db, deck.id, today)
    charged = max(0, introduced - reserved)
    return max(0, deck.new_cards_per_day - charged)


def increment_daily_new_card_count(db: sqlite3.Connection, deck_id: int, now: Optional[datetime] = None, count: int = 1):
    now = now or datetime.now()
    today = day_label(now)
    with transaction(db):
        deck = _require_deck(db, deck_id)
        if deck.last_new_card_date != today:
            crud.update_deck_new_card_counter(db, deck_id, count, today)
        else:
            crud.update_deck_new_card_counter(db, deck_id, deck.new_cards_introduced_today + count, today)


# --- Queues ---

def sort_by_frequency(cards: List[Card]) -> List[Card]:
    """Ranked cards first (lower sort_order first), then creation order."""
    return sorted(cards, key=lambda c: (
        c.sort_order is None,
        c.sort_order if c.sort_order is not None else 0,
        c.created_at,
        c.id,
    ))


def get_new_cards(db: sqlite3.Connection, deck_id: int) -> List[Card]:
    return crud.get_cards_by_state(db, deck_id, 'new')


def get_due_cards(db: sqlite3.Connection, deck_id: int, now: Optional[datetime] = None) -> List[Card]:
    now = now or datetime.now()
    return [
        card for card in crud.get_all_cards_in_deck(db, deck_id)
        if card.review_state.state != 'new' and card.review_state.due_date <= now
    ]


def get_new_card_batch(db: sqlite3.Connection, deck: Deck, now: Optional[datetime] = None) -> List[Card]:
    """The new cards to study now, bounded by today's remaining quota."""
    now = now or datetime.now()
    with transaction(db):
        remaining = get_daily_new_card_remaining(db, deck, now)
        if remaining <= 0:
            return []
        deck = _require_deck(db, deck.id)

        # Current batch still has unreviewed cards
        if deck.current_batch_card_ids:
            batch_cards = crud.get_cards(db, deck.current_batch_card_ids)
            still_new = [c for c in batch_cards if c.review_state.state == 'new']
            if still_new:
                return sort_by_frequency(still_new)[:remaining]

        # Current batch is complete (or empty), introduce next batch
        new_cards = sort_by_frequency(get_new_cards(db, deck.id))
        if not new_cards:
            return []
        batch = new_cards[:min(remaining, deck.new_card_batch_size)]
        crud.update_deck_batch(db, deck.id, [c.id for c in batch])
        logger.debug("Deck %s: new batch %s", deck.id, [c.id for c in batch])
    return batch


def get_next_learning_due(db: sqlite3.Connection, deck_id: int) -> Optional[datetime]:
    """Earliest due time among learning/relearning cards, or None."""
    due_dates = [
        card.review_state.due_date for card in crud.get_all_cards_in_deck(db, deck_id)
        if card.review_state.state in ('learning', 'relearning')
    ]
    return min(due_dates) if due_dates else None


def get_review_queue(db: sqlite3.Connection, deck: Deck, now: Optional[datetime] = None) -> ReviewQueue:
    now = now or datetime.now()
    return ReviewQueue(
        due_cards=get_due_cards(db, deck.id, now),
        new_cards=get_new_card_batch(db, deck, now),
        next_learning_due=get_next_learning_due(db, deck.id),
    )


# --- Card creation ---

def create_card(db: sqlite3.Connection, card: CardCreate, now: Optional[datetime] = None) -> Card:
    """
    Auto-conjugation cards start in learning and never touch the new-card
    counter. Manual and practice cards charge it immediately.
    """
    now = now or datetime.now()
    with transaction(db):
        _require_deck(db, card.deck_id)
        if card.source == 'auto-conjugation':
            review_state = learning_review_state(now)
        else:
            review_state = new_review_state(now)
        created = crud.create_card(db, card, review_state, now)
        if card.source in CHARGED_AT_CREATION:
            increment_daily_new_card_count(db, card.deck_id, now)
    return created


def create_card_pair(
    db: sqlite3.Connection,
    card: CardPairCreate,
    lookup: Optional[ConjugationLookup] = None,
    now: Optional[datetime] = None
) -> List[Card]:
    """Creates both directions of a card with a shared pair id."""
    verb_data = card.verb_data
    # backText is usually the target-language word
    if verb_data is None and lookup is not None:
        verb_data = lookup.lookup(card.back_text) or lookup.lookup(card.front_text)

    pair_id = uuid.uuid4().hex
    fields = card.model_dump(exclude={'verb_data'})
    created = []
    with transaction(db):
        for direction in ('source-to-target', 'target-to-source'):
            single = CardCreate(**{**fields, 'direction': direction}, verb_data=verb_data, pair_id=pair_id)
            created.append(create_card(db, single, now))
    return created


def delete_card(db: sqlite3.Connection, card_id: int):
    with transaction(db):
        if crud.get_card(db, card_id) is None:
            raise EntityNotFoundError("Card", card_id)
        crud.delete_card(db, card_id)


# --- Grading ---

def _charged_at_creation(card: Card, today: str) -> bool:
    return card.source in CHARGED_AT_CREATION and day_label(card.created_at) == today


def review_card(db: sqlite3.Connection, card_id: int, grade: int, now: Optional[datetime] = None) -> Card:
    """
    Grades a card, stores its new review state and a history record.
    A card leaving 'new' charges today's counter once, unless it already
    charged today's counter when it was created.
    """
    validate_grade(grade)
    now = now or datetime.now()
    today = day_label(now)

    with transaction(db):
        card = crud.get_card(db, card_id)
        if card is None:
            raise EntityNotFoundError("Card", card_id)
        deck = _require_deck(db, card.deck_id)
        learning_steps, graduating_interval = get_scheduler_settings(db, deck)

        previous_state = card.review_state.state
        card.review_state = schedule(card.review_state, grade, now, learning_steps, graduating_interval)
        updated = crud.update_card_review_data(db, card)
        crud.log_review(db, deck.id, card.id, grade, previous_state, updated.review_state.state, now)

        if previous_state == 'new' and updated.review_state.state != 'new' and not _charged_at_creation(card, today):
            increment_daily_new_card_count(db, deck.id, now)

    logger.info("Card %s graded %s: %s -> %s", card_id, grade, previous_state, updated.review_state.state)
    return updated


def get_scheduling_preview(
    card: Card,
    now: Optional[datetime] = None,
    learning_steps_minutes: Optional[List[int]] = None,
    graduating_interval_days: int = DEFAULT_GRADUATING_INTERVAL
) -> Dict[int, datetime]:
    """Due date each grade would produce, without saving anything."""
    now = now or datetime.now()
    steps = learning_steps_minutes or [int(step) for step in DEFAULT_LEARNING_STEPS.split()]
    return {
        grade: schedule(card.review_state, grade, now, steps, graduating_interval_days).due_date
        for grade in VALID_GRADES
    }


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_interval(now: datetime, due: datetime) -> str:
    """
    Format the interval between now and a due date as a human-readable string.
    Examples: "<1m", "10m", "1h", "1d", "4d", "2mo", "1y"
    """
    minutes = _round_half_up((due - now).total_seconds() / 60)
    if minutes < 1:
        return '<1m'
    if minutes < 60:
        return f"{minutes}m"
    hours = _round_half_up(minutes / 60)
    if hours < 24:
        return f"{hours}h"
    days = _round_half_up(hours / 24)
    if days < 30:
        return f"{days}d"
    months = _round_half_up(days / 30)
    if months < 12:
        return f"{months}mo"
    years = _round_half_up(days / 365)
    return f"{years}y"
