# verb_flow/crud.py
#
# Row-level access. Functions here never commit; callers group writes with
# database.transaction().

import sqlite3
import json
from typing import List, Optional, Iterable
from datetime import datetime
from verb_flow.models import (
    DeckCreate, DeckUpdate, Deck, CardCreate, Card, ReviewState, VerbData,
    ConjugationAutoAdd, ReviewHistory, Settings,
)


# --- Helper functions to parse rows into models ---
def _row_to_deck(row: sqlite3.Row) -> Optional[Deck]:
    if not row:
        return None
    deck_dict = dict(row)
    deck_dict['construct_checklist'] = json.loads(deck_dict['construct_checklist'])
    deck_dict['current_batch_card_ids'] = json.loads(deck_dict['current_batch_card_ids'])
    deck_dict['auto_add_conjugations'] = bool(deck_dict['auto_add_conjugations'])
    return Deck.model_validate(deck_dict)


def _row_to_card(row: sqlite3.Row) -> Optional[Card]:
    if not row:
        return None
    card_dict = dict(row)
    card_dict['tags'] = json.loads(card_dict['tags'])
    if card_dict['verb_data']:
        card_dict['verb_data'] = VerbData.model_validate_json(card_dict['verb_data'])
    card_dict['review_state'] = ReviewState(
        state=card_dict.pop('state'),
        due_date=card_dict.pop('next_review_date'),
        last_reviewed_date=card_dict.pop('last_reviewed_date'),
        interval_days=card_dict.pop('interval_days'),
        ease_factor=card_dict.pop('ease_factor'),
        learning_step=card_dict.pop('learning_step'),
        reviews=card_dict.pop('reviews'),
        lapses=card_dict.pop('lapses'),
        introduction_date=card_dict.pop('introduction_date'),
    )
    return Card.model_validate(card_dict)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


# --- Deck CRUD ---
def create_deck(db: sqlite3.Connection, deck: DeckCreate, now: Optional[datetime] = None) -> Deck:
    cursor = db.cursor()
    cursor.execute(
        """INSERT INTO decks (
            name, target_language, created_at, construct_checklist,
            new_cards_per_day, new_card_batch_size, auto_add_conjugations,
            max_conjugation_cards_per_day, learning_steps, graduating_interval
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            deck.name, deck.target_language, (now or datetime.now()).isoformat(),
            json.dumps(deck.construct_checklist), deck.new_cards_per_day,
            deck.new_card_batch_size, int(deck.auto_add_conjugations),
            deck.max_conjugation_cards_per_day, deck.learning_steps, deck.graduating_interval,
        )
    )
    return get_deck(db, cursor.lastrowid)


def get_deck(db: sqlite3.Connection, deck_id: int) -> Optional[Deck]:
    cursor = db.cursor()
    cursor.execute("SELECT * FROM decks WHERE id = ?", (deck_id,))
    return _row_to_deck(cursor.fetchone())


def get_all_decks(db: sqlite3.Connection) -> List[Deck]:
    cursor = db.cursor()
    cursor.execute("SELECT * FROM decks ORDER BY id")
    return [_row_to_deck(row) for row in cursor.fetchall()]


def update_deck_settings(db: sqlite3.Connection, deck_id: int, updates: DeckUpdate) -> Optional[Deck]:
    values = updates.model_dump(exclude_unset=True, exclude_none=True)
    if 'construct_checklist' in values:
        values['construct_checklist'] = json.dumps(values['construct_checklist'])
    if 'auto_add_conjugations' in values:
        values['auto_add_conjugations'] = int(values['auto_add_conjugations'])
    if values:
        assignments = ", ".join(f"{column} = ?" for column in values)
        db.execute(f"UPDATE decks SET {assignments} WHERE id = ?", (*values.values(), deck_id))
    return get_deck(db, deck_id)


def update_deck_new_card_counter(db: sqlite3.Connection, deck_id: int, introduced_today: int, last_date: str):
    db.execute(
        "UPDATE decks SET new_cards_introduced_today = ?, last_new_card_date = ? WHERE id = ?",
        (introduced_today, last_date, deck_id)
    )


def update_deck_conjugation_counter(db: sqlite3.Connection, deck_id: int, added_today: int, last_date: str):
    db.execute(
        "UPDATE decks SET conjugation_cards_added_today = ?, last_conjugation_card_date = ? WHERE id = ?",
        (added_today, last_date, deck_id)
    )


def update_deck_batch(db: sqlite3.Connection, deck_id: int, card_ids: Iterable[int]):
    db.execute(
        "UPDATE decks SET current_batch_card_ids = ? WHERE id = ?",
        (json.dumps(list(card_ids)), deck_id)
    )


def delete_deck(db: sqlite3.Connection, deck_id: int):
    db.execute("DELETE FROM decks WHERE id = ?", (deck_id,))


# --- Card CRUD ---
def get_card(db: sqlite3.Connection, card_id: int) -> Optional[Card]:
    cursor = db.cursor()
    cursor.execute("SELECT * FROM cards WHERE id = ?", (card_id,))
    return _row_to_card(cursor.fetchone())


def get_cards(db: sqlite3.Connection, card_ids: Iterable[int]) -> List[Card]:
    """Fetches the given ids, skipping ids that no longer exist."""
    card_ids = list(card_ids)
    if not card_ids:
        return []
    placeholders = ", ".join("?" for _ in card_ids)
    cursor = db.cursor()
    cursor.execute(f"SELECT * FROM cards WHERE id IN ({placeholders})", card_ids)
    return [_row_to_card(row) for row in cursor.fetchall()]


def get_all_cards_in_deck(db: sqlite3.Connection, deck_id: int) -> List[Card]:
    cursor = db.cursor()
    cursor.execute("SELECT * FROM cards WHERE deck_id = ? ORDER BY id", (deck_id,))
    return [_row_to_card(row) for row in cursor.fetchall()]


def get_cards_by_state(db: sqlite3.Connection, deck_id: int, state: str) -> List[Card]:
    cursor = db.cursor()
    cursor.execute("SELECT * FROM cards WHERE deck_id = ? AND state = ? ORDER BY id", (deck_id, state))
    return [_row_to_card(row) for row in cursor.fetchall()]


def get_cards_by_pair(db: sqlite3.Connection, deck_id: int, pair_id: str) -> List[Card]:
    cursor = db.cursor()
    cursor.execute("SELECT * FROM cards WHERE deck_id = ? AND pair_id = ? ORDER BY id", (deck_id, pair_id))
    return [_row_to_card(row) for row in cursor.fetchall()]


def count_reserved_new_cards(db: sqlite3.Connection, deck_id: int, day: str) -> int:
    """Counts manual/practice cards created on `day` that are still new."""
    cursor = db.cursor()
    cursor.execute(
        """SELECT COUNT(*) FROM cards
           WHERE deck_id = ? AND state = 'new' AND source IN ('manual', 'practice')
           AND substr(created_at, 1, 10) = ?""",
        (deck_id, day)
    )
    return cursor.fetchone()[0]


def create_card(db: sqlite3.Connection, card: CardCreate, review_state: ReviewState, now: Optional[datetime] = None) -> Card:
    cursor = db.cursor()
    verb_data_json = card.verb_data.model_dump_json() if card.verb_data else None
    cursor.execute(
        """INSERT INTO cards (
            deck_id, front_text, back_text, direction, tags, notes, verb_data,
            source, sort_order, pair_id, created_at, state, next_review_date,
            last_reviewed_date, interval_days, ease_factor, learning_step,
            reviews, lapses, introduction_date
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            card.deck_id, card.front_text, card.back_text, card.direction,
            json.dumps(card.tags, ensure_ascii=False), card.notes, verb_data_json,
            card.source, card.sort_order, card.pair_id, (now or datetime.now()).isoformat(),
            review_state.state, review_state.due_date.isoformat(),
            _iso(review_state.last_reviewed_date), review_state.interval_days,
            review_state.ease_factor, review_state.learning_step, review_state.reviews,
            review_state.lapses, _iso(review_state.introduction_date),
        )
    )
    return get_card(db, cursor.lastrowid)


def update_card_review_data(db: sqlite3.Connection, card: Card) -> Optional[Card]:
    state = card.review_state
    db.execute(
        """UPDATE cards SET
            next_review_date = ?,
            interval_days = ?,
            ease_factor = ?,
            reviews = ?,
            lapses = ?,
            last_reviewed_date = ?,
            state = ?,
            learning_step = ?,
            introduction_date = ?
           WHERE id = ?""",
        (
            state.due_date.isoformat(), state.interval_days, state.ease_factor,
            state.reviews, state.lapses, _iso(state.last_reviewed_date), state.state,
            state.learning_step, _iso(state.introduction_date), card.id
        )
    )
    return get_card(db, card.id)



def delete_card(db: sqlite3.Connection, card_id: int):
    db.execute("DELETE FROM review_history WHERE card_id = ?", (card_id,))
    db.execute("DELETE FROM cards WHERE id = ?", (card_id,))


def search_cards(db: sqlite3.Connection, deck_id: int, query: str = "", tags: Optional[List[str]] = None) -> List[Card]:
    cards = get_all_cards_in_deck(db, deck_id)
    if query:
        lower = query.lower()
        cards = [c for c in cards if lower in c.front_text.lower() or lower in c.back_text.lower()]
    if tags:
        cards = [c for c in cards if any(t in c.tags for t in tags)]
    return cards


# --- Conjugation auto-add records ---
def _row_to_auto_add(row: sqlite3.Row) -> ConjugationAutoAdd:
    return ConjugationAutoAdd.model_validate(dict(row))


def create_auto_add(
    db: sqlite3.Connection, deck_id: int, verb_infinitive: str, tense_id: str,
    person: str, form: str, added_date: str, now: Optional[datetime] = None
) -> ConjugationAutoAdd:
    cursor = db.cursor()
    cursor.execute(
        """INSERT INTO conjugation_auto_adds
           (deck_id, verb_infinitive, tense_id, person, form, added_date, created_at)
           VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (deck_id, verb_infinitive, tense_id, person, form, added_date, (now or datetime.now()).isoformat())
    )
    cursor.execute("SELECT * FROM conjugation_auto_adds WHERE id = ?", (cursor.lastrowid,))
    return _row_to_auto_add(cursor.fetchone())


def get_auto_adds_for_verb(db: sqlite3.Connection, deck_id: int, verb_infinitive: str) -> List[ConjugationAutoAdd]:
    cursor = db.cursor()
    cursor.execute(
        "SELECT * FROM conjugation_auto_adds WHERE deck_id = ? AND verb_infinitive = ? ORDER BY id",
        (deck_id, verb_infinitive)
    )
    return [_row_to_auto_add(row) for row in cursor.fetchall()]


def count_auto_adds_for_verb_on_day(db: sqlite3.Connection, deck_id: int, verb_infinitive: str, day: str) -> int:
    cursor = db.cursor()
    cursor.execute(
        """SELECT COUNT(*) FROM conjugation_auto_adds
           WHERE deck_id = ? AND verb_infinitive = ? AND added_date = ?""",
        (deck_id, verb_infinitive, day)
    )
    return cursor.fetchone()[0]


def get_auto_adds_on_day(db: sqlite3.Connection, deck_id: int, day: str) -> List[ConjugationAutoAdd]:
    cursor = db.cursor()
    cursor.execute(
        "SELECT * FROM conjugation_auto_adds WHERE deck_id = ? AND added_date = ? ORDER BY id",
        (deck_id, day)
    )
    return [_row_to_auto_add(row) for row in cursor.fetchall()]


# --- Settings CRUD ---
def get_setting(db: sqlite3.Connection, setting_name: str) -> Optional[str]:
    cursor = db.cursor()
    cursor.execute("SELECT setting_value FROM settings WHERE setting_name = ?", (setting_name,))
    row = cursor.fetchone()
    return row[0] if row else None


def set_setting(db: sqlite3.Connection, setting_name: str, setting_value: str) -> Settings:
    db.execute(
        "INSERT OR REPLACE INTO settings (setting_name, setting_value) VALUES (?, ?)",
        (setting_name, setting_value)
    )
    return Settings(setting_name=setting_name, setting_value=setting_value)


def get_all_settings(db: sqlite3.Connection) -> List[Settings]:
    cursor = db.cursor()
    cursor.execute("SELECT setting_name, setting_value FROM settings")
    return [Settings.model_validate(dict(row)) for row in cursor.fetchall()]


# --- Review history ---
def log_review(
    db: sqlite3.Connection, deck_id: int, card_id: int, grade: int,
    previous_state: str, new_state: str, reviewed_at: Optional[datetime] = None
):
    """Inserts a record of a single review action into the history table."""
    db.execute(
        """INSERT INTO review_history
           (deck_id, card_id, review_timestamp, grade, previous_state, new_state)
           VALUES (?, ?, ?, ?, ?, ?)""",
        (deck_id, card_id, (reviewed_at or datetime.now()).isoformat(), grade, previous_state, new_state)
    )


def get_review_history(db: sqlite3.Connection, card_id: int) -> List[ReviewHistory]:
    cursor = db.cursor()
    cursor.execute("SELECT * FROM review_history WHERE card_id = ? ORDER BY id", (card_id,))
    return [ReviewHistory.model_validate(dict(row)) for row in cursor.fetchall()]

