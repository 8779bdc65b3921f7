# verb_flow/reflexive.py
"""
Reflexive pronoun placement for conjugated forms of -se verbs.

Simple and compound tenses take the pronoun as a separate leading word
("me levanto", "me he levantado"). Affirmative imperatives take it as a suffix,
which can move the stress and requires a written accent ("levántate").
"""
from functools import lru_cache
from typing import List, Optional

from verb_flow.conjugator import conjugate_verb
from verb_flow.exceptions import NotAVerbError

REFLEXIVE_PRONOUNS = {
    'yo': 'me',
    'tú': 'te',
    'él/ella/usted': 'se',
    'usted': 'se',
    'nosotros/as': 'nos',
    'nosotros': 'nos',
    'vosotros/as': 'os',
    'vosotros': 'os',
    'ellos/ellas/ustedes': 'se',
    'ustedes': 'se',
}

PRONOUN_TOKENS = {'me', 'te', 'se', 'nos', 'os'}

VOWELS = 'aeiouáéíóúü'
# Accented i/u break a diphthong, so they count as strong here.
STRONG_VOWELS = 'aeoáéóíú'
ACCENTED = str.maketrans('aeiou', 'áéíóú')
UNACCENTED = str.maketrans('áéíóú', 'aeiou')


def is_reflexive_verb(infinitive: str) -> bool:
    return infinitive.endswith('se') and len(infinitive) > 2


def get_base_infinitive(infinitive: str) -> str:
    """levantarse -> levantar; non-reflexive input is returned as is."""
    return infinitive[:-2] if is_reflexive_verb(infinitive) else infinitive


def get_reflexive_pronoun(person: str) -> str:
    return REFLEXIVE_PRONOUNS.get(person, 'se')


def _vowel_nuclei(word: str) -> List[List[int]]:
    """
    Groups vowel positions into syllable nuclei. Adjacent vowels form one
    nucleus (diphthong) unless both are strong, which splits them (hiatus).
    """
    nuclei: List[List[int]] = []
    previous = -2
    for i, ch in enumerate(word.lower()):
        if ch not in VOWELS:
            continue
        if previous == i - 1 and not (ch in STRONG_VOWELS and word[previous].lower() in STRONG_VOWELS):
            nuclei[-1].append(i)
        else:
            nuclei.append([i])
        previous = i
    return nuclei


def _has_written_accent(word: str) -> bool:
    return any(ch in 'áéíóú' for ch in word)


def _accent_penultimate(form: str) -> str:
    """
    Writes the accent that keeps the original stress once a suffix is added.
    Only words stressed on the penultimate syllable by default (ending in a
    vowel, n or s) without a written accent need it.
    """
    nuclei = _vowel_nuclei(form)
    if len(nuclei) < 2 or _has_written_accent(form) or form[-1].lower() not in 'aeiouns':
        return form
    nucleus = nuclei[-2]
    strong = [i for i in nucleus if form[i].lower() in STRONG_VOWELS]
    target = strong[0] if strong else nucleus[-1]
    return form[:target] + form[target].translate(ACCENTED) + form[target + 1:]


def _person_key(person: str) -> str:
    if person.startswith('nosotros'):
        return 'nosotros'
    if person.startswith('vosotros'):
        return 'vosotros'
    return person


def _attach_to_imperative(form: str, person: str, pronoun: str) -> str:
    key = _person_key(person)
    if key == 'nosotros':
        stressed = _accent_penultimate(form)
        base = stressed[:-1] if stressed.endswith('s') else stressed
        return base + 'nos'
    if key == 'vosotros':
        if form == 'id':
            return 'idos'
        if form.endswith('id'):
            return form[:-2] + 'íos'
        if form.endswith('d'):
            return form[:-1] + 'os'
        return form + 'os'
    if len(_vowel_nuclei(form)) == 1:
        return form.translate(UNACCENTED) + pronoun
    return _accent_penultimate(form) + pronoun


@lru_cache(maxsize=256)
def _bare_imperative(infinitive: str, person: str) -> Optional[str]:
    """The engine's imperative for the non-reflexive verb, or None when unknown."""
    try:
        verb_data = conjugate_verb(get_base_infinitive(infinitive))
    except NotAVerbError:
        return None
    tense = verb_data.get_tense('imperative')
    for conjugation in tense.conjugations if tense else []:
        if conjugation.person in (person, _person_key(person)):
            return conjugation.form
    return None


def _is_attached_imperative(form: str, person: str, pronoun: str, infinitive: str) -> bool:
    key = _person_key(person)
    if key == 'vosotros':
        return form == 'idos' or form.endswith(('aos', 'eos', 'íos'))
    if not form.endswith(pronoun) or len(form) <= len(pronoun):
        return False
    if _has_written_accent(form):
        return True
    base = form[:-len(pronoun)]
    if len(_vowel_nuclei(base)) != 1:
        return False
    # A one-syllable base takes no accent, so "mete" (meter) and "hete" (haber)
    # look alike. The verb's own bare imperative settles it when it is known.
    return _bare_imperative(infinitive, person) != form


def format_reflexive_form(form: str, person: str, infinitive: str, tense_id: str) -> str:
    """
    Adds the reflexive pronoun to a conjugated form of a reflexive infinitive.
    Returns the form unchanged when the verb is not reflexive, the form is
    blank, or the pronoun is already present.
    """
    if not is_reflexive_verb(infinitive) or not form.strip():
        return form

    pronoun = get_reflexive_pronoun(person)
    form = form.strip()

    if tense_id == 'imperative' and ' ' not in form:
        if _is_attached_imperative(form, person, pronoun, infinitive):
            return form
        return _attach_to_imperative(form, person, pronoun)

    if form.split()[0].lower() in PRONOUN_TOKENS:
        return form
    return f"{pronoun} {form}"
