# verb_flow/database.py

import logging
import sqlite3
from contextlib import contextmanager
from typing import Optional

from verb_flow.config import settings
from verb_flow.exceptions import PersistenceFailure

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS decks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        target_language TEXT NOT NULL DEFAULT 'spanish',
        created_at TEXT NOT NULL,
        construct_checklist TEXT NOT NULL DEFAULT '{}', -- JSON object
        new_cards_per_day INTEGER NOT NULL DEFAULT 20,
        new_card_batch_size INTEGER NOT NULL DEFAULT 5,
        current_batch_card_ids TEXT NOT NULL DEFAULT '[]', -- JSON list
        new_cards_introduced_today INTEGER NOT NULL DEFAULT 0,
        last_new_card_date TEXT,
        auto_add_conjugations INTEGER NOT NULL DEFAULT 1,
        max_conjugation_cards_per_day INTEGER NOT NULL DEFAULT 5,
        conjugation_cards_added_today INTEGER NOT NULL DEFAULT 0,
        last_conjugation_card_date TEXT,
        learning_steps TEXT,
        graduating_interval INTEGER
    );

    CREATE TABLE IF NOT EXISTS cards (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        deck_id INTEGER NOT NULL,
        front_text TEXT NOT NULL,
        back_text TEXT NOT NULL,
        direction TEXT NOT NULL,
        tags TEXT NOT NULL DEFAULT '[]', -- JSON list
        notes TEXT NOT NULL DEFAULT '',
        verb_data TEXT, -- JSON VerbData
        source TEXT NOT NULL DEFAULT 'manual',
        sort_order INTEGER,
        pair_id TEXT,
        created_at TEXT NOT NULL,
        state TEXT NOT NULL DEFAULT 'new',
        next_review_date TEXT NOT NULL,
        last_reviewed_date TEXT,
        interval_days REAL DEFAULT 0.0,
        ease_factor REAL DEFAULT 2.5,
        learning_step INTEGER NOT NULL DEFAULT 0,
        reviews INTEGER DEFAULT 0,
        lapses INTEGER DEFAULT 0,
        introduction_date TEXT,
        FOREIGN KEY(deck_id) REFERENCES decks(id) ON DELETE CASCADE
    );
    CREATE INDEX IF NOT EXISTS idx_cards_deck ON cards(deck_id);
    CREATE INDEX IF NOT EXISTS idx_cards_deck_pair ON cards(deck_id, pair_id);

    CREATE TABLE IF NOT EXISTS conjugation_auto_adds (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        deck_id INTEGER NOT NULL,
        verb_infinitive TEXT NOT NULL,
        tense_id TEXT NOT NULL,
        person TEXT NOT NULL,
        form TEXT NOT NULL,
        added_date TEXT NOT NULL,
        created_at TEXT NOT NULL,
        UNIQUE(deck_id, verb_infinitive, tense_id, person),
        FOREIGN KEY(deck_id) REFERENCES decks(id) ON DELETE CASCADE
    );
    CREATE INDEX IF NOT EXISTS idx_auto_adds_deck_verb ON conjugation_auto_adds(deck_id, verb_infinitive);
    CREATE INDEX IF NOT EXISTS idx_auto_adds_deck_day ON conjugation_auto_adds(deck_id, added_date);

    CREATE TABLE IF NOT EXISTS review_history (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        deck_id INTEGER NOT NULL,
        card_id INTEGER NOT NULL,
        grade INTEGER NOT NULL,
        review_timestamp TEXT NOT NULL,
        previous_state TEXT NOT NULL,
        new_state TEXT NOT NULL,
        FOREIGN KEY(deck_id) REFERENCES decks(id) ON DELETE CASCADE,
        FOREIGN KEY(card_id) REFERENCES cards(id) ON DELETE CASCADE
    );

    CREATE TABLE IF NOT EXISTS settings (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        setting_name TEXT NOT NULL UNIQUE,
        setting_value TEXT NOT NULL
    );
"""


def connect(database_url: Optional[str] = None) -> sqlite3.Connection:
    """Opens a connection in autocommit mode; writes are grouped with transaction()."""
    conn = sqlite3.connect(database_url or settings.database_url, check_same_thread=False, isolation_level=None)
    conn.row_factory = sqlite3.Row # Allows accessing columns by name
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def get_db():
    conn = connect()
    try:
        yield conn
    finally:
        conn.close()


def create_tables(conn: Optional[sqlite3.Connection] = None):
    own_connection = conn is None
    if own_connection:
        conn = connect()
    try:
        conn.executescript(SCHEMA)
    finally:
        if own_connection:
            conn.close()


@contextmanager
def transaction(conn: sqlite3.Connection):
    """
    Runs the enclosed reads and writes as one atomic unit.
    BEGIN IMMEDIATE takes the write lock up front, so quota counters read inside
    the block cannot change underneath it. Nested use joins the outer transaction.
    """
    if conn.in_transaction:
        yield conn
        return

    try:
        conn.execute("BEGIN IMMEDIATE")
    except sqlite3.Error as e:
        raise PersistenceFailure(f"Could not start transaction: {e}") from e

    try:
        yield conn
    except sqlite3.Error as e:
        conn.rollback()
        logger.error("Transaction rolled back: %s", e)
        raise PersistenceFailure(str(e)) from e
    except BaseException:
        conn.rollback()
        raise
    else:
        try:
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise PersistenceFailure(f"Commit failed: {e}") from e
