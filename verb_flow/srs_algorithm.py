# verb_flow/srs_algorithm.py
from datetime import datetime, timedelta
from typing import List

from verb_flow.exceptions import InvalidGradeError
from verb_flow.models import ReviewState

AGAIN, HARD, GOOD, EASY = 1, 2, 3, 4
VALID_GRADES = (AGAIN, HARD, GOOD, EASY)

MIN_EASE = 1.3
EASY_BONUS = 1.3
HARD_FACTOR = 1.2
RELEARNED_INTERVAL_DAYS = 1

# SM-2 quality for each grade; Again never reaches the ease formula.
_QUALITY = {HARD: 3, GOOD: 4, EASY: 5}


def new_review_state(now: datetime) -> ReviewState:
    return ReviewState(state='new', due_date=now)


def learning_review_state(now: datetime) -> ReviewState:
    """Starting state for cards that skip the new queue and are due at once."""
    return ReviewState(state='learning', due_date=now, introduction_date=now.date())


def validate_grade(grade) -> int:
    if isinstance(grade, bool) or not isinstance(grade, int) or grade not in VALID_GRADES:
        raise InvalidGradeError(grade)
    return grade


def _update_ease(ease_factor: float, grade: int) -> float:
    quality = _QUALITY[grade]
    ease_factor += (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
    return max(MIN_EASE, ease_factor)


def schedule(
    state: ReviewState,
    grade: int,
    now: datetime,
    learning_steps_minutes: List[int],
    graduating_interval_days: int
) -> ReviewState:
    """
    Modified SM-2 that manages the card state machine.
    grade: 1 (Again), 2 (Hard), 3 (Good), 4 (Easy)
    new -> learning | review, learning -> review, review <-> relearning.
    Returns a new ReviewState; the input is not modified.
    """
    validate_grade(grade)
    steps = learning_steps_minutes or [10]
    card = state.model_copy()

    card.last_reviewed_date = now
    card.reviews += 1

    # If this is the card's first-ever review, stamp its introduction date.
    if card.state == 'new':
        card.introduction_date = now.date()
        card.state = 'learning'
        card.learning_step = 0

    if grade == AGAIN:  # --- Incorrect Answer (Lapse) ---
        if card.state == 'review':
            card.lapses += 1
            card.state = 'relearning'
            card.ease_factor = max(MIN_EASE, card.ease_factor - 0.2)
            card.interval_days = 0
        card.learning_step = 0
        # Reset to the first learning step
        card.due_date = now + timedelta(minutes=steps[0])

    elif card.state in ('learning', 'relearning'):
        if grade == EASY:
            _graduate(card, now, graduating_interval_days, easy=True)
        elif grade == HARD:
            # Repeat the current step
            step = min(card.learning_step, len(steps) - 1)
            card.due_date = now + timedelta(minutes=steps[step])
        # If there are more learning steps, use the next one
        elif card.learning_step < len(steps):
            card.due_date = now + timedelta(minutes=steps[card.learning_step])
            card.learning_step += 1
        # Otherwise, the card graduates
        else:
            _graduate(card, now, graduating_interval_days, easy=False)

    else:  # --- Graduated card answered correctly ---
        if card.interval_days == 0:
            interval = graduating_interval_days
        elif grade == HARD:
            interval = max(card.interval_days + 1, round(card.interval_days * HARD_FACTOR))
        else:  # Standard SM-2 interval calculation
            interval = max(card.interval_days + 1, round(card.interval_days * card.ease_factor))
            if grade == EASY:
                interval = round(interval * EASY_BONUS)
        card.interval_days = interval
        card.ease_factor = _update_ease(card.ease_factor, grade)
        card.due_date = now + timedelta(days=card.interval_days)

    return card


def _graduate(card: ReviewState, now: datetime, graduating_interval_days: int, easy: bool):
    if card.state == 'relearning':
        interval = max(RELEARNED_INTERVAL_DAYS, card.interval_days)
    else:
        interval = graduating_interval_days
    if easy:
        interval = max(interval + 1, round(interval * EASY_BONUS))
    card.state = 'review'
    card.learning_step = 0
    card.interval_days = interval
    card.due_date = now + timedelta(days=interval)
