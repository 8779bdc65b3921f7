# tests/test_auto_add.py

import os
import random
import sqlite3
import tempfile
import unittest
from datetime import datetime, timedelta
from unittest.mock import patch

from build_conjugations import build_artifact, write_artifact
from verb_flow import crud, models, review
from verb_flow.auto_add import get_eligible_conjugations, maybe_auto_add_conjugation_card
from verb_flow.conjugation_lookup import ConjugationLookup
from verb_flow.conjugator import conjugate_verb
from verb_flow.database import connect, create_tables
from verb_flow.exceptions import EntityNotFoundError, PersistenceFailure
from verb_flow.models import AutoAddReason


class FirstChoice:
    """Deterministic stand-in for random: always picks the first eligible form."""

    def choice(self, seq):
        return seq[0]


class TestAutoAdd(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        path = os.path.join(self.tmp.name, "spanish-conjugations.json")
        write_artifact(build_artifact(["hablar", "comer", "levantar"]), path)
        self.lookup = ConjugationLookup(path)

        self.db = connect(":memory:")
        create_tables(self.db)
        self.now = datetime(2024, 3, 1, 9, 0, 0)
        self.deck = crud.create_deck(self.db, models.DeckCreate(
            name="Spanish", construct_checklist={"present": True}, max_conjugation_cards_per_day=5
        ), self.now)
        self.verb_card = self._card("to speak", "hablar")

    def tearDown(self):
        self.db.close()
        self.tmp.cleanup()

    def _card(self, front, back, **kwargs):
        card = models.CardCreate(deck_id=self.deck.id, front_text=front, back_text=back, **kwargs)
        return review.create_card(self.db, card, self.now)

    def _auto_add(self, card=None, grade=3, now=None, rng=None):
        deck = crud.get_deck(self.db, self.deck.id)
        return maybe_auto_add_conjugation_card(
            self.db, card or self.verb_card, grade, deck, self.lookup, now or self.now, rng or FirstChoice()
        )

    def test_adds_pair_audit_record_and_counter(self):
        result = self._auto_add()

        self.assertTrue(result.added)
        self.assertEqual(result.form, "hablo")
        self.assertEqual(result.translation, "to speak (yo, present)")

        added = [c for c in crud.get_all_cards_in_deck(self.db, self.deck.id) if c.source == 'auto-conjugation']
        self.assertEqual(len(added), 2)
        self.assertEqual({c.direction for c in added}, {"source-to-target", "target-to-source"})
        self.assertEqual(added[0].pair_id, added[1].pair_id)
        for card in added:
            self.assertEqual(card.front_text, "to speak (yo, present)")
            self.assertEqual(card.back_text, "hablo")
            self.assertEqual(card.tags, ["hablar", "present"])
            self.assertEqual(card.review_state.state, "learning")

        records = crud.get_auto_adds_for_verb(self.db, self.deck.id, "hablar")
        self.assertEqual([(r.tense_id, r.person, r.form, r.added_date) for r in records],
                         [("present", "yo", "hablo", "2024-03-01")])
        deck = crud.get_deck(self.db, self.deck.id)
        self.assertEqual(deck.conjugation_cards_added_today, 1)
        self.assertEqual(deck.last_conjugation_card_date, "2024-03-01")
        # Auto-added cards never consume new-card slots
        self.assertEqual(deck.new_cards_introduced_today, 1)

    def test_grade_too_low(self):
        for grade in (1, 2):
            result = self._auto_add(grade=grade)
            self.assertFalse(result.added)
            self.assertEqual(result.reason, AutoAddReason.GRADE_TOO_LOW)

    def test_disabled(self):
        crud.update_deck_settings(self.db, self.deck.id, models.DeckUpdate(auto_add_conjugations=False))
        self.assertEqual(self._auto_add().reason, AutoAddReason.DISABLED)

    def test_not_a_verb(self):
        card = self._card("house", "casa")
        self.assertEqual(self._auto_add(card).reason, AutoAddReason.NOT_A_VERB)

    def test_once_per_verb_per_day(self):
        self.assertTrue(self._auto_add().added)
        self.assertEqual(self._auto_add().reason, AutoAddReason.VERB_ALREADY_ADDED_TODAY)
        self.assertTrue(self._auto_add(now=self.now + timedelta(days=1)).added)
        self.assertEqual(len(crud.get_auto_adds_for_verb(self.db, self.deck.id, "hablar")), 2)

    def test_daily_limit_across_verbs(self):
        crud.update_deck_settings(self.db, self.deck.id, models.DeckUpdate(max_conjugation_cards_per_day=1))
        comer = self._card("to eat", "comer")
        self.assertTrue(self._auto_add().added)
        self.assertEqual(self._auto_add(comer).reason, AutoAddReason.DAILY_LIMIT)
        # Stale counter from a previous day does not block
        self.assertTrue(self._auto_add(comer, now=self.now + timedelta(days=1)).added)
        self.assertEqual(crud.get_deck(self.db, self.deck.id).conjugation_cards_added_today, 1)

    def test_all_forms_added(self):
        for day in range(6):
            self.assertTrue(self._auto_add(now=self.now + timedelta(days=day)).added)
        result = self._auto_add(now=self.now + timedelta(days=6))
        self.assertEqual(result.reason, AutoAddReason.ALL_FORMS_ADDED)

    def test_failed_write_leaves_no_partial_effect(self):
        with patch.object(crud, 'update_deck_conjugation_counter',
                          side_effect=sqlite3.OperationalError("disk I/O error")):
            with self.assertRaises(PersistenceFailure):
                self._auto_add()

        added = [c for c in crud.get_all_cards_in_deck(self.db, self.deck.id) if c.source == 'auto-conjugation']
        self.assertEqual(added, [])
        self.assertEqual(crud.get_auto_adds_for_verb(self.db, self.deck.id, "hablar"), [])
        deck = crud.get_deck(self.db, self.deck.id)
        self.assertEqual(deck.conjugation_cards_added_today, 0)
        self.assertIsNone(deck.last_conjugation_card_date)

    def test_missing_deck_reports_deck_id(self):
        missing = crud.get_deck(self.db, self.deck.id).model_copy(update={"id": 999})
        with self.assertRaises(EntityNotFoundError) as ctx:
            maybe_auto_add_conjugation_card(self.db, self.verb_card, 3, missing, self.lookup, self.now, FirstChoice())
        self.assertEqual(ctx.exception.entity_id, 999)

    def test_each_form_added_at_most_once(self):
        rng = random.Random(7)
        forms = []
        for day in range(6):
            forms.append(self._auto_add(now=self.now + timedelta(days=day), rng=rng).form)
        self.assertEqual(sorted(forms), sorted(["hablo", "hablas", "habla", "hablamos", "habláis", "hablan"]))

    def test_disabled_tenses_are_never_picked(self):
        crud.update_deck_settings(self.db, self.deck.id,
                                  models.DeckUpdate(construct_checklist={"present": False, "preterite": True}))
        result = self._auto_add()
        self.assertEqual(result.form, "hablé")
        self.assertEqual(result.translation, "to speak (yo, preterite)")

    def test_existing_cards_are_skipped_ignoring_accents(self):
        self._card("I speak", "Hablo")
        self.assertEqual(self._auto_add().form, "hablas")

    def test_mini_translation_preferred(self):
        verb_data = conjugate_verb("comer")
        verb_data.get_tense("present").conjugations[0].mini_translation = "I eat"
        card = self._card("to eat", "comer", verb_data=verb_data)
        result = self._auto_add(card)
        self.assertEqual(result.translation, "I eat")

    def test_reflexive_forms_are_formatted(self):
        verb_data = conjugate_verb("levantar")
        verb_data.infinitive = "levantarse"
        card = self._card("to get up", "levantarse", verb_data=verb_data)
        self.assertEqual(self._auto_add(card).form, "me levanto")

    def test_eligible_conjugations_respect_records(self):
        crud.create_auto_add(self.db, self.deck.id, "hablar", "present", "yo", "hablo", "2024-02-01")
        deck = crud.get_deck(self.db, self.deck.id)
        eligible = get_eligible_conjugations(
            self.db, conjugate_verb("hablar"), deck, crud.get_all_cards_in_deck(self.db, self.deck.id)
        )
        self.assertEqual([e.person for e in eligible],
                         ["tú", "él/ella/usted", "nosotros/as", "vosotros/as", "ellos/ellas/ustedes"])


if __name__ == '__main__':
    unittest.main()
