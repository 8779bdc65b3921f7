from fastapi import FastAPI, Request, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

import logging
import sqlite3
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Dict, List, Optional

from verb_flow import crud, models
from verb_flow.auto_add import maybe_auto_add_conjugation_card
from verb_flow.config import settings
from verb_flow.conjugation_lookup import ConjugationLookup
from verb_flow.conjugator import conjugate_verb, default_construct_checklist
from verb_flow.database import get_db, create_tables, transaction
from verb_flow.deduplication import check_duplicate
from verb_flow.exceptions import (
    VerbFlowException,
    NotAVerbError,
    InvalidGradeError,
    EntityNotFoundError,
    ArtifactUnavailableError,
    PersistenceFailure,
    ConflictError,
)
from verb_flow import review

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


class CardsCreated(BaseModel):
    cards: List[models.Card]
    # Existing cards with the same target text; creation still goes ahead
    duplicates: List[models.Card] = []


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    yield


app = FastAPI(title="Verb Flow", lifespan=lifespan)
app.state.lookup = ConjugationLookup()


@app.exception_handler(VerbFlowException)
async def verb_flow_exception_handler(request: Request, exc: VerbFlowException):
    if isinstance(exc, (EntityNotFoundError, NotAVerbError)):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, InvalidGradeError):
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, ConflictError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, (PersistenceFailure, ArtifactUnavailableError)):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "type": type(exc).__name__},
    )


# Dependencies
def get_database():
    yield from get_db()


def get_lookup(request: Request) -> ConjugationLookup:
    return request.app.state.lookup


def _require_deck(db: sqlite3.Connection, deck_id: int) -> models.Deck:
    deck = crud.get_deck(db, deck_id)
    if not deck:
        raise EntityNotFoundError("Deck", deck_id)
    return deck


def _require_card(db: sqlite3.Connection, card_id: int) -> models.Card:
    card = crud.get_card(db, card_id)
    if not card:
        raise EntityNotFoundError("Card", card_id)
    return card


@app.get("/health")
async def health():
    return {"status": "ok"}


# --- Decks ---

@app.get("/decks", response_model=List[models.Deck])
def list_decks(db: sqlite3.Connection = Depends(get_database)):
    return crud.get_all_decks(db)


@app.post("/decks", response_model=models.Deck, status_code=status.HTTP_201_CREATED)
def create_deck(deck: models.DeckCreate, db: sqlite3.Connection = Depends(get_database)):
    if any(d.name == deck.name for d in crud.get_all_decks(db)):
        raise ConflictError(f"A deck with the name '{deck.name}' already exists.")
    if not deck.construct_checklist:
        deck.construct_checklist = default_construct_checklist()
    with transaction(db):
        created = crud.create_deck(db, deck)
    logger.info("Created deck %s (%s)", created.id, created.name)
    return created


@app.get("/decks/{deck_id}", response_model=models.Deck)
def get_deck(deck_id: int, db: sqlite3.Connection = Depends(get_database)):
    return _require_deck(db, deck_id)


@app.patch("/decks/{deck_id}", response_model=models.Deck)
def update_deck_settings(deck_id: int, updates: models.DeckUpdate, db: sqlite3.Connection = Depends(get_database)):
    _require_deck(db, deck_id)
    if updates.name and any(d.name == updates.name and d.id != deck_id for d in crud.get_all_decks(db)):
        raise ConflictError(f"A deck with the name '{updates.name}' already exists.")
    with transaction(db):
        return crud.update_deck_settings(db, deck_id, updates)


@app.delete("/decks/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_deck(deck_id: int, db: sqlite3.Connection = Depends(get_database)):
    _require_deck(db, deck_id)
    with transaction(db):
        crud.delete_deck(db, deck_id)


@app.get("/decks/{deck_id}/cards", response_model=List[models.Card])
def search_cards(
    deck_id: int,
    q: str = "",
    tag: Optional[List[str]] = Query(None),
    db: sqlite3.Connection = Depends(get_database)
):
    _require_deck(db, deck_id)
    return crud.search_cards(db, deck_id, q, tag)


@app.get("/decks/{deck_id}/duplicates", response_model=List[models.Card])
def find_duplicates(deck_id: int, text: str, db: sqlite3.Connection = Depends(get_database)):
    _require_deck(db, deck_id)
    return check_duplicate(db, deck_id, text)


@app.get("/decks/{deck_id}/queue", response_model=models.ReviewQueue)
def review_queue(deck_id: int, db: sqlite3.Connection = Depends(get_database)):
    deck = _require_deck(db, deck_id)
    return review.get_review_queue(db, deck)


@app.get("/decks/{deck_id}/auto-adds", response_model=List[models.ConjugationAutoAdd])
def list_auto_adds(deck_id: int, day: Optional[str] = None, db: sqlite3.Connection = Depends(get_database)):
    """Conjugation cards added automatically on a day (YYYY-MM-DD, defaults to today)."""
    _require_deck(db, deck_id)
    return crud.get_auto_adds_on_day(db, deck_id, day or models.day_label(datetime.now()))


# --- Cards ---

@app.post("/cards", response_model=CardsCreated, status_code=status.HTTP_201_CREATED)
def create_card(card: models.CardCreate, db: sqlite3.Connection = Depends(get_database)):
    target_text = card.back_text if card.direction == 'source-to-target' else card.front_text
    duplicates = check_duplicate(db, card.deck_id, target_text)
    created = review.create_card(db, card)
    return CardsCreated(cards=[created], duplicates=duplicates)


@app.post("/cards/pair", response_model=CardsCreated, status_code=status.HTTP_201_CREATED)
def create_card_pair(
    card: models.CardPairCreate,
    db: sqlite3.Connection = Depends(get_database),
    lookup: ConjugationLookup = Depends(get_lookup)
):
    duplicates = check_duplicate(db, card.deck_id, card.back_text)
    created = review.create_card_pair(db, card, lookup)
    return CardsCreated(cards=created, duplicates=duplicates)


@app.get("/cards/{card_id}", response_model=models.Card)
def get_card(card_id: int, db: sqlite3.Connection = Depends(get_database)):
    return _require_card(db, card_id)


@app.delete("/cards/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_card(card_id: int, db: sqlite3.Connection = Depends(get_database)):
    review.delete_card(db, card_id)


@app.get("/cards/{card_id}/preview", response_model=Dict[int, str])
def scheduling_preview(card_id: int, db: sqlite3.Connection = Depends(get_database)):
    """Interval label for each grade, e.g. {1: "10m", 3: "4d"}."""
    card = _require_card(db, card_id)
    deck = _require_deck(db, card.deck_id)
    learning_steps, graduating_interval = review.get_scheduler_settings(db, deck)
    now = datetime.now()
    preview = review.get_scheduling_preview(card, now, learning_steps, graduating_interval)
    return {grade: review.format_interval(now, due) for grade, due in preview.items()}


@app.post("/cards/{card_id}/review", response_model=models.ReviewOutcome)
def submit_review(
    card_id: int,
    review_request: models.ReviewRequest,
    db: sqlite3.Connection = Depends(get_database),
    lookup: ConjugationLookup = Depends(get_lookup)
):
    now = datetime.now()
    updated_card = review.review_card(db, card_id, review_request.grade, now)

    # The review is already stored; a failed auto-add must not undo it.
    auto_add_result = None
    try:
        deck = _require_deck(db, updated_card.deck_id)
        auto_add_result = maybe_auto_add_conjugation_card(
            db, updated_card, review_request.grade, deck, lookup, now
        )
    except Exception:
        logger.exception("Auto-add failed after reviewing card %s", card_id)

    return models.ReviewOutcome(card=updated_card, auto_add=auto_add_result)


# --- Conjugations ---

@app.get("/conjugations/{infinitive}", response_model=models.VerbData)
def conjugate(infinitive: str):
    """Rule-engine conjugation table."""
    return conjugate_verb(infinitive.strip().lower())


@app.get("/conjugations/{infinitive}/static", response_model=models.VerbData)
def static_conjugation(infinitive: str, lookup: ConjugationLookup = Depends(get_lookup)):
    verb_data = lookup.lookup(infinitive)
    if verb_data is None:
        raise EntityNotFoundError("Verb", infinitive)
    return verb_data


@app.post("/conjugations/reload")
def reload_conjugations(lookup: ConjugationLookup = Depends(get_lookup)):
    lookup.reload()
    return {"loaded": lookup.load()}


# --- Global settings ---

@app.get("/settings", response_model=List[models.Settings])
def list_settings(db: sqlite3.Connection = Depends(get_database)):
    return crud.get_all_settings(db)


@app.put("/settings", response_model=models.Settings)
def update_setting(setting: models.Settings, db: sqlite3.Connection = Depends(get_database)):
    with transaction(db):
        return crud.set_setting(db, setting.setting_name, setting.setting_value)
