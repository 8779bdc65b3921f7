# tests/test_review.py

import sqlite3
import unittest
from datetime import datetime, timedelta
from unittest.mock import patch

from verb_flow import crud, models, review
from verb_flow.database import connect, create_tables
from verb_flow.exceptions import EntityNotFoundError, InvalidGradeError, PersistenceFailure


class ReviewTestCase(unittest.TestCase):

    def setUp(self):
        self.db = connect(":memory:")
        create_tables(self.db)
        self.day1 = datetime(2024, 3, 1, 9, 0, 0)
        self.day2 = self.day1 + timedelta(days=1)

    def tearDown(self):
        self.db.close()

    def _deck(self, **kwargs):
        return crud.create_deck(self.db, models.DeckCreate(name=kwargs.pop("name", "Spanish"), **kwargs), self.day1)

    def _card(self, deck, front, back="", now=None, **kwargs):
        card = models.CardCreate(deck_id=deck.id, front_text=front, back_text=back or front, **kwargs)
        return review.create_card(self.db, card, now or self.day1)

    def _deck_state(self, deck):
        return crud.get_deck(self.db, deck.id)


class TestDailyCounter(ReviewTestCase):

    def test_manual_cards_charge_counter_at_creation(self):
        deck = self._deck()
        self._card(deck, "uno")
        self._card(deck, "dos", source="practice")
        self._card(deck, "tres", source="imported")
        state = self._deck_state(deck)
        self.assertEqual(state.new_cards_introduced_today, 2)
        self.assertEqual(state.last_new_card_date, "2024-03-01")

    def test_auto_conjugation_cards_start_learning_and_do_not_count(self):
        deck = self._deck()
        card = self._card(deck, "hablo", source="auto-conjugation")
        self.assertEqual(card.review_state.state, "learning")
        self.assertEqual(card.review_state.due_date, self.day1)
        self.assertEqual(self._deck_state(deck).new_cards_introduced_today, 0)

    def test_counter_resets_on_new_day(self):
        deck = self._deck(new_cards_per_day=3)
        crud.update_deck_new_card_counter(self.db, deck.id, 3, "2024-03-01")
        self.assertEqual(review.get_daily_new_card_remaining(self.db, deck, self.day1), 0)

        self.assertEqual(review.get_daily_new_card_remaining(self.db, deck, self.day2), 3)
        state = self._deck_state(deck)
        self.assertEqual(state.new_cards_introduced_today, 0)
        self.assertEqual(state.last_new_card_date, "2024-03-02")

    def test_increment_with_count(self):
        deck = self._deck()
        review.increment_daily_new_card_count(self.db, deck.id, self.day1, count=2)
        review.increment_daily_new_card_count(self.db, deck.id, self.day1)
        self.assertEqual(self._deck_state(deck).new_cards_introduced_today, 3)
        review.increment_daily_new_card_count(self.db, deck.id, self.day2)
        self.assertEqual(self._deck_state(deck).new_cards_introduced_today, 1)

    def test_missing_deck(self):
        card = models.CardCreate(deck_id=42, front_text="a", back_text="b")
        with self.assertRaises(EntityNotFoundError):
            review.create_card(self.db, card, self.day1)


class TestNewCardBatch(ReviewTestCase):

    def test_two_per_day_scenario(self):
        """2 per day, batch 5, 10 manual cards: 2 today, none after grading, 2 tomorrow."""
        deck = self._deck(new_cards_per_day=2, new_card_batch_size=5)
        for i in range(10):
            self._card(deck, f"word{i}")

        batch = review.get_new_card_batch(self.db, deck, self.day1)
        self.assertEqual([c.front_text for c in batch], ["word0", "word1"])

        for card in batch:
            review.review_card(self.db, card.id, 3, self.day1 + timedelta(minutes=5))
        self.assertEqual(review.get_new_card_batch(self.db, deck, self.day1 + timedelta(minutes=6)), [])

        tomorrow = review.get_new_card_batch(self.db, deck, self.day2)
        self.assertEqual([c.front_text for c in tomorrow], ["word2", "word3"])

    def test_quota_bounds_batch(self):
        deck = self._deck(new_cards_per_day=3, new_card_batch_size=5)
        for i in range(8):
            self._card(deck, f"word{i}", source="imported")
        batch = review.get_new_card_batch(self.db, deck, self.day1)
        self.assertEqual(len(batch), 3)
        self.assertEqual(self._deck_state(deck).current_batch_card_ids, [c.id for c in batch])

    def test_batch_size_bounds_batch(self):
        deck = self._deck(new_cards_per_day=20, new_card_batch_size=2)
        for i in range(5):
            self._card(deck, f"word{i}", source="imported")
        self.assertEqual(len(review.get_new_card_batch(self.db, deck, self.day1)), 2)

    def test_pending_batch_is_returned_until_reviewed(self):
        deck = self._deck(new_cards_per_day=20, new_card_batch_size=2)
        for i in range(5):
            self._card(deck, f"word{i}", source="imported")
        first = review.get_new_card_batch(self.db, deck, self.day1)
        review.review_card(self.db, first[0].id, 3, self.day1)

        pending = review.get_new_card_batch(self.db, deck, self.day1)
        self.assertEqual([c.id for c in pending], [first[1].id])

        review.review_card(self.db, first[1].id, 3, self.day1)
        following = review.get_new_card_batch(self.db, deck, self.day1)
        self.assertEqual([c.front_text for c in following], ["word2", "word3"])

    def test_frequency_order(self):
        deck = self._deck(new_cards_per_day=20, new_card_batch_size=3)
        self._card(deck, "unranked", source="imported")
        self._card(deck, "second", source="imported", sort_order=20)
        self._card(deck, "first", source="imported", sort_order=5)
        batch = review.get_new_card_batch(self.db, deck, self.day1)
        self.assertEqual([c.front_text for c in batch], ["first", "second", "unranked"])

    def test_no_new_cards(self):
        deck = self._deck()
        self.assertEqual(review.get_new_card_batch(self.db, deck, self.day1), [])


class TestReviewCard(ReviewTestCase):

    def test_review_writes_state_and_history(self):
        deck = self._deck()
        card = self._card(deck, "to speak", "hablar")
        updated = review.review_card(self.db, card.id, 3, self.day1)

        self.assertEqual(updated.review_state.state, "learning")
        self.assertEqual(updated.review_state.due_date, self.day1 + timedelta(minutes=10))
        history = crud.get_review_history(self.db, card.id)
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].grade, 3)
        self.assertEqual(history[0].previous_state, "new")
        self.assertEqual(history[0].new_state, "learning")

    def test_imported_card_charges_counter_once(self):
        deck = self._deck()
        card = self._card(deck, "hablar", source="imported")
        review.review_card(self.db, card.id, 3, self.day1)
        review.review_card(self.db, card.id, 3, self.day1)
        self.assertEqual(self._deck_state(deck).new_cards_introduced_today, 1)

    def test_manual_card_from_earlier_day_charges_today(self):
        deck = self._deck(new_cards_per_day=2)
        card = self._card(deck, "hablar")
        review.review_card(self.db, card.id, 3, self.day2)
        self.assertEqual(review.get_daily_new_card_remaining(self.db, deck, self.day2), 1)

    def test_uses_deck_then_global_scheduler_settings(self):
        deck = self._deck(learning_steps="1 5")
        card = self._card(deck, "hablar")
        self.assertEqual(review.review_card(self.db, card.id, 3, self.day1).review_state.due_date,
                         self.day1 + timedelta(minutes=1))

        other = self._deck(name="Other")
        crud.set_setting(self.db, "learning_steps", "30")
        card = self._card(other, "comer")
        self.assertEqual(review.review_card(self.db, card.id, 1, self.day1).review_state.due_date,
                         self.day1 + timedelta(minutes=30))

    def test_invalid_grade_changes_nothing(self):
        deck = self._deck()
        card = self._card(deck, "hablar")
        with self.assertRaises(InvalidGradeError):
            review.review_card(self.db, card.id, 5, self.day1)
        self.assertEqual(crud.get_card(self.db, card.id).review_state.state, "new")
        self.assertEqual(crud.get_review_history(self.db, card.id), [])

    def test_failed_write_leaves_card_history_and_counter_unchanged(self):
        deck = self._deck()
        card = self._card(deck, "hablar", source="imported")
        with patch.object(crud, 'update_deck_new_card_counter',
                          side_effect=sqlite3.OperationalError("database is locked")):
            with self.assertRaises(PersistenceFailure):
                review.review_card(self.db, card.id, 3, self.day1)

        self.assertEqual(crud.get_card(self.db, card.id).review_state.state, "new")
        self.assertEqual(crud.get_review_history(self.db, card.id), [])
        self.assertEqual(self._deck_state(deck).new_cards_introduced_today, 0)

    def test_missing_card(self):
        with self.assertRaises(EntityNotFoundError):
            review.review_card(self.db, 999, 3, self.day1)

    @patch('verb_flow.review.datetime')
    def test_defaults_to_current_time(self, mock_datetime):
        mock_datetime.now.return_value = self.day1
        deck = self._deck()
        card = self._card(deck, "hablar")
        updated = review.review_card(self.db, card.id, 1)
        self.assertEqual(updated.review_state.last_reviewed_date, self.day1)


class TestCardPairsAndQueue(ReviewTestCase):

    def test_create_card_pair_shares_pair_id(self):
        deck = self._deck()
        pair = review.create_card_pair(self.db, models.CardPairCreate(
            deck_id=deck.id, front_text="to speak", back_text="hablar", tags=["verb"]
        ), now=self.day1)
        self.assertEqual([c.direction for c in pair], ["source-to-target", "target-to-source"])
        self.assertEqual(pair[0].pair_id, pair[1].pair_id)
        self.assertIsNotNone(pair[0].pair_id)
        self.assertEqual(pair[1].tags, ["verb"])
        self.assertEqual(self._deck_state(deck).new_cards_introduced_today, 2)

    def test_delete_card(self):
        deck = self._deck()
        card = self._card(deck, "hablar")
        review.delete_card(self.db, card.id)
        self.assertIsNone(crud.get_card(self.db, card.id))
        with self.assertRaises(EntityNotFoundError):
            review.delete_card(self.db, card.id)

    def test_review_queue(self):
        deck = self._deck(new_cards_per_day=5)
        learning = self._card(deck, "hablo", source="auto-conjugation")
        later = self._card(deck, "comer", source="imported")
        review.review_card(self.db, later.id, 3, self.day1)
        self._card(deck, "vivir", source="imported")

        queue = review.get_review_queue(self.db, deck, self.day1 + timedelta(minutes=1))
        self.assertEqual([c.id for c in queue.due_cards], [learning.id])
        self.assertEqual([c.front_text for c in queue.new_cards], ["vivir"])
        self.assertEqual(queue.next_learning_due, self.day1)

    def test_next_learning_due_none(self):
        deck = self._deck()
        self.assertIsNone(review.get_next_learning_due(self.db, deck.id))


class TestIntervalFormatting(unittest.TestCase):

    def test_format_interval(self):
        now = datetime(2024, 3, 1, 9, 0, 0)
        self.assertEqual(review.format_interval(now, now + timedelta(seconds=20)), "<1m")
        self.assertEqual(review.format_interval(now, now + timedelta(minutes=10)), "10m")
        self.assertEqual(review.format_interval(now, now + timedelta(hours=1)), "1h")
        self.assertEqual(review.format_interval(now, now + timedelta(days=4)), "4d")
        self.assertEqual(review.format_interval(now, now + timedelta(days=60)), "2mo")
        self.assertEqual(review.format_interval(now, now + timedelta(days=400)), "1y")
        self.assertEqual(review.format_interval(now, now - timedelta(days=1)), "<1m")

    def test_scheduling_preview(self):
        now = datetime(2024, 3, 1, 9, 0, 0)
        card = models.Card(id=1, deck_id=1, front_text="a", back_text="b", created_at=now,
                           review_state=models.ReviewState(state='new', due_date=now))
        preview = review.get_scheduling_preview(card, now, [10, 1440], 4)
        self.assertEqual(sorted(preview), [1, 2, 3, 4])
        self.assertEqual(preview[1], now + timedelta(minutes=10))
        self.assertEqual(preview[4], now + timedelta(days=5))
        self.assertEqual(card.review_state.state, 'new')


if __name__ == '__main__':
    unittest.main()
