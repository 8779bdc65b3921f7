# tests/test_crud.py

import unittest
import sqlite3
from datetime import datetime, timedelta

from verb_flow import crud, models
from verb_flow.database import connect, create_tables, transaction
from verb_flow.exceptions import PersistenceFailure
from verb_flow.srs_algorithm import new_review_state


class TestCRUD(unittest.TestCase):

    def setUp(self):
        """Set up an in-memory database for each test."""
        self.db = connect(":memory:")
        create_tables(self.db)
        self.now = datetime(2024, 3, 1, 9, 0, 0)

        # Create a sample deck for card tests
        self.deck1 = crud.create_deck(self.db, models.DeckCreate(name="Deck 1"), self.now)

    def tearDown(self):
        """Close the database connection after each test."""
        self.db.close()

    def _card(self, front="to speak", back="hablar", deck_id=None, **kwargs):
        card = models.CardCreate(deck_id=deck_id or self.deck1.id, front_text=front, back_text=back, **kwargs)
        return crud.create_card(self.db, card, new_review_state(self.now), self.now)

    # --- Deck Tests ---
    def test_create_and_get_deck(self):
        deck_model = models.DeckCreate(name="Test Deck", construct_checklist={"present": True})
        created_deck = crud.create_deck(self.db, deck_model)
        self.assertIsNotNone(created_deck.id)
        self.assertEqual(created_deck.name, "Test Deck")
        self.assertEqual(created_deck.construct_checklist, {"present": True})
        self.assertEqual(created_deck.current_batch_card_ids, [])
        self.assertTrue(created_deck.auto_add_conjugations)

        retrieved_deck = crud.get_deck(self.db, created_deck.id)
        self.assertEqual(retrieved_deck.id, created_deck.id)

    def test_update_deck_settings_only_touches_given_fields(self):
        updated = crud.update_deck_settings(
            self.db, self.deck1.id,
            models.DeckUpdate(new_cards_per_day=2, auto_add_conjugations=False, construct_checklist={"preterite": True})
        )
        self.assertEqual(updated.new_cards_per_day, 2)
        self.assertFalse(updated.auto_add_conjugations)
        self.assertEqual(updated.construct_checklist, {"preterite": True})
        self.assertEqual(updated.new_card_batch_size, 5)
        self.assertEqual(updated.name, "Deck 1")

    def test_counters_and_batch(self):
        crud.update_deck_new_card_counter(self.db, self.deck1.id, 3, "2024-03-01")
        crud.update_deck_conjugation_counter(self.db, self.deck1.id, 1, "2024-03-01")
        crud.update_deck_batch(self.db, self.deck1.id, [4, 2])
        deck = crud.get_deck(self.db, self.deck1.id)
        self.assertEqual(deck.new_cards_introduced_today, 3)
        self.assertEqual(deck.last_new_card_date, "2024-03-01")
        self.assertEqual(deck.conjugation_cards_added_today, 1)
        self.assertEqual(deck.current_batch_card_ids, [4, 2])

    def test_delete_deck_cascades(self):
        card = self._card()
        crud.create_auto_add(self.db, self.deck1.id, "hablar", "present", "yo", "hablo", "2024-03-01")
        crud.log_review(self.db, self.deck1.id, card.id, 3, "new", "learning", self.now)
        crud.delete_deck(self.db, self.deck1.id)

        self.assertIsNone(crud.get_deck(self.db, self.deck1.id))
        self.assertIsNone(crud.get_card(self.db, card.id))
        self.assertEqual(crud.get_auto_adds_for_verb(self.db, self.deck1.id, "hablar"), [])
        self.assertEqual(crud.get_review_history(self.db, card.id), [])

    # --- Card Tests ---
    def test_create_card_round_trips_review_state_and_verb_data(self):
        verb_data = models.VerbData(infinitive="hablar", tenses=[models.TenseData(
            tense_id="present", tense_name="Present", description="",
            conjugations=[models.ConjugationForm(person="yo", form="hablo")],
        )])
        card = self._card(tags=["verb", "común"], verb_data=verb_data, sort_order=3, pair_id="abc")

        self.assertEqual(card.review_state.state, "new")
        self.assertEqual(card.review_state.due_date, self.now)
        self.assertEqual(card.tags, ["verb", "común"])
        self.assertEqual(card.verb_data.get_tense("present").conjugations[0].form, "hablo")
        self.assertEqual(card.sort_order, 3)
        self.assertEqual(card.pair_id, "abc")
        self.assertEqual(card.created_at, self.now)

    def test_update_card_review_data(self):
        card = self._card()
        card.review_state.state = "review"
        card.review_state.interval_days = 4
        card.review_state.due_date = self.now + timedelta(days=4)
        card.review_state.introduction_date = self.now.date()
        updated = crud.update_card_review_data(self.db, card)

        self.assertEqual(updated.review_state.state, "review")
        self.assertEqual(updated.review_state.interval_days, 4)
        self.assertEqual(updated.review_state.due_date, self.now + timedelta(days=4))
        self.assertEqual(updated.review_state.introduction_date, self.now.date())

    def test_get_cards_skips_missing_ids(self):
        a = self._card()
        b = self._card(front="to eat", back="comer")
        self.assertEqual(sorted(c.id for c in crud.get_cards(self.db, [a.id, b.id, 999])), [a.id, b.id])
        self.assertEqual(crud.get_cards(self.db, []), [])

    def test_get_cards_by_state_and_pair(self):
        a = self._card(pair_id="p1")
        b = self._card(direction="target-to-source", pair_id="p1")
        self._card(front="to eat", back="comer")
        self.assertEqual([c.id for c in crud.get_cards_by_pair(self.db, self.deck1.id, "p1")], [a.id, b.id])
        self.assertEqual(len(crud.get_cards_by_state(self.db, self.deck1.id, "new")), 3)
        self.assertEqual(crud.get_cards_by_state(self.db, self.deck1.id, "review"), [])

    def test_count_reserved_new_cards(self):
        self._card()
        self._card(front="to eat", back="comer", source="practice")
        self._card(front="to live", back="vivir", source="imported")
        self.assertEqual(crud.count_reserved_new_cards(self.db, self.deck1.id, "2024-03-01"), 2)
        self.assertEqual(crud.count_reserved_new_cards(self.db, self.deck1.id, "2024-03-02"), 0)

    def test_search_cards(self):
        self._card(tags=["verb"])
        self._card(front="house", back="casa", tags=["noun"])
        self.assertEqual([c.back_text for c in crud.search_cards(self.db, self.deck1.id, "HAB")], ["hablar"])
        self.assertEqual([c.back_text for c in crud.search_cards(self.db, self.deck1.id, tags=["noun"])], ["casa"])
        self.assertEqual(len(crud.search_cards(self.db, self.deck1.id)), 2)

    def test_delete_card_removes_history(self):
        card = self._card()
        crud.log_review(self.db, self.deck1.id, card.id, 3, "new", "learning", self.now)
        crud.delete_card(self.db, card.id)
        self.assertIsNone(crud.get_card(self.db, card.id))
        self.assertEqual(crud.get_review_history(self.db, card.id), [])

    # --- Auto-add records ---
    def test_auto_add_records(self):
        crud.create_auto_add(self.db, self.deck1.id, "hablar", "present", "yo", "hablo", "2024-03-01", self.now)
        crud.create_auto_add(self.db, self.deck1.id, "comer", "present", "tú", "comes", "2024-03-02", self.now)
        self.assertEqual(len(crud.get_auto_adds_for_verb(self.db, self.deck1.id, "hablar")), 1)
        self.assertEqual(crud.count_auto_adds_for_verb_on_day(self.db, self.deck1.id, "hablar", "2024-03-01"), 1)
        self.assertEqual(crud.count_auto_adds_for_verb_on_day(self.db, self.deck1.id, "hablar", "2024-03-02"), 0)
        self.assertEqual([a.form for a in crud.get_auto_adds_on_day(self.db, self.deck1.id, "2024-03-02")], ["comes"])

    def test_auto_add_record_is_unique_per_form(self):
        crud.create_auto_add(self.db, self.deck1.id, "hablar", "present", "yo", "hablo", "2024-03-01")
        with self.assertRaises(sqlite3.IntegrityError):
            crud.create_auto_add(self.db, self.deck1.id, "hablar", "present", "yo", "hablo", "2024-03-02")

    # --- Settings ---
    def test_settings(self):
        self.assertIsNone(crud.get_setting(self.db, "learning_steps"))
        crud.set_setting(self.db, "learning_steps", "1 10")
        crud.set_setting(self.db, "learning_steps", "5 60")
        self.assertEqual(crud.get_setting(self.db, "learning_steps"), "5 60")
        self.assertEqual(len(crud.get_all_settings(self.db)), 1)

    # --- Transactions ---
    def test_transaction_rolls_back_on_error(self):
        with self.assertRaises(PersistenceFailure):
            with transaction(self.db):
                self._card()
                crud.create_auto_add(self.db, self.deck1.id, "hablar", "present", "yo", "hablo", "2024-03-01")
                crud.create_auto_add(self.db, self.deck1.id, "hablar", "present", "yo", "hablo", "2024-03-01")
        self.assertEqual(crud.get_all_cards_in_deck(self.db, self.deck1.id), [])
        self.assertEqual(crud.get_auto_adds_for_verb(self.db, self.deck1.id, "hablar"), [])

    def test_nested_transaction_joins_outer(self):
        with self.assertRaises(ValueError):
            with transaction(self.db):
                with transaction(self.db):
                    self._card()
                raise ValueError("abort")
        self.assertEqual(crud.get_all_cards_in_deck(self.db, self.deck1.id), [])


if __name__ == '__main__':
    unittest.main()
