# verb_flow/models.py

from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, Dict, List, Literal
from datetime import date, datetime

CardDirection = Literal['source-to-target', 'target-to-source']
CardSource = Literal['manual', 'imported', 'practice', 'auto-conjugation']
ReviewStateName = Literal['new', 'learning', 'review', 'relearning']


# --- Conjugation Models ---

class TenseDefinition(BaseModel):
    tense_id: str
    tense_name: str
    description: str
    persons: List[str]


class ConjugationForm(BaseModel):
    person: str
    form: str
    mini_translation: str = ""  # short gloss, e.g. "you eat"


class TenseData(BaseModel):
    tense_id: str
    tense_name: str
    description: str
    conjugations: List[ConjugationForm]


class VerbData(BaseModel):
    infinitive: str
    language: str = "spanish"
    tenses: List[TenseData] = []

    def get_tense(self, tense_id: str) -> Optional[TenseData]:
        for tense in self.tenses:
            if tense.tense_id == tense_id:
                return tense
        return None


# --- Deck Models ---

class DeckBase(BaseModel):
    name: str
    target_language: str = "spanish"
    new_cards_per_day: int = 20
    new_card_batch_size: int = 5
    auto_add_conjugations: bool = True
    max_conjugation_cards_per_day: int = 5
    # tense id -> enabled; missing entries count as disabled
    construct_checklist: Dict[str, bool] = {}
    learning_steps: Optional[str] = None      # e.g., "10 1440"
    graduating_interval: Optional[int] = None # e.g., 4 (days)


class DeckCreate(DeckBase):
    pass


class DeckUpdate(BaseModel):
    name: Optional[str] = None
    new_cards_per_day: Optional[int] = None
    new_card_batch_size: Optional[int] = None
    auto_add_conjugations: Optional[bool] = None
    max_conjugation_cards_per_day: Optional[int] = None
    construct_checklist: Optional[Dict[str, bool]] = None
    learning_steps: Optional[str] = None
    graduating_interval: Optional[int] = None


class Deck(DeckBase):
    id: int
    created_at: datetime
    current_batch_card_ids: List[int] = []
    new_cards_introduced_today: int = 0
    last_new_card_date: Optional[str] = None  # "YYYY-MM-DD"
    conjugation_cards_added_today: int = 0
    last_conjugation_card_date: Optional[str] = None

    class Config:
        from_attributes = True


# --- Card Models ---

class ReviewState(BaseModel):
    state: ReviewStateName = 'new'
    due_date: datetime = Field(default_factory=datetime.now)
    last_reviewed_date: Optional[datetime] = None
    interval_days: float = 0.0
    ease_factor: float = 2.5
    learning_step: int = 0
    reviews: int = 0
    lapses: int = 0
    introduction_date: Optional[date] = None


class CardBase(BaseModel):
    front_text: str
    back_text: str
    direction: CardDirection = 'source-to-target'
    tags: List[str] = []
    notes: str = ""
    verb_data: Optional[VerbData] = None
    source: CardSource = 'manual'
    sort_order: Optional[int] = None  # frequency rank, lower first


class CardCreate(CardBase):
    deck_id: int
    pair_id: Optional[str] = None


class CardPairCreate(CardBase):
    deck_id: int


class Card(CardCreate):
    id: int
    created_at: datetime
    review_state: ReviewState = Field(default_factory=ReviewState)

    class Config:
        from_attributes = True

    @property
    def target_text(self) -> str:
        """The target-language side of the card."""
        return self.back_text if self.direction == 'source-to-target' else self.front_text


# --- Review Models ---

class ReviewHistory(BaseModel):
    id: int
    deck_id: int
    card_id: int
    grade: int
    review_timestamp: datetime
    previous_state: ReviewStateName
    new_state: ReviewStateName


class ConjugationAutoAdd(BaseModel):
    id: int
    deck_id: int
    verb_infinitive: str
    tense_id: str
    person: str
    form: str
    added_date: str  # "YYYY-MM-DD"
    created_at: datetime


class AutoAddReason(str, Enum):
    GRADE_TOO_LOW = "grade_too_low"
    DISABLED = "disabled"
    NOT_A_VERB = "not_a_verb"
    DAILY_LIMIT = "daily_limit"
    VERB_ALREADY_ADDED_TODAY = "verb_already_added_today"
    ALL_FORMS_ADDED = "all_forms_added"


class AutoAddResult(BaseModel):
    added: bool
    form: Optional[str] = None
    translation: Optional[str] = None
    reason: Optional[AutoAddReason] = None


class ReviewQueue(BaseModel):
    due_cards: List[Card] = []
    new_cards: List[Card] = []
    next_learning_due: Optional[datetime] = None


class ReviewRequest(BaseModel):
    grade: int


class ReviewOutcome(BaseModel):
    card: Card
    auto_add: Optional[AutoAddResult] = None


# --- Settings Model ---
class Settings(BaseModel):
    setting_name: str
    setting_value: str


def day_label(now: datetime) -> str:
    """Calendar day label used by the daily counters."""
    return now.date().isoformat()
