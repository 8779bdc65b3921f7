import json
import logging
import os
import sys
from datetime import datetime, timezone

from verb_flow.config import settings
from verb_flow.conjugator import IRREGULAR_VERBS, TENSE_DEFINITIONS, conjugate_verb
from verb_flow.exceptions import NotAVerbError

logger = logging.getLogger(__name__)

# Frequent regular verbs included even without a word list
COMMON_REGULAR_VERBS = [
    'hablar', 'comer', 'vivir', 'trabajar', 'estudiar', 'aprender', 'escribir',
    'leer', 'beber', 'abrir', 'llamar', 'llegar', 'pasar', 'quedar', 'dejar',
    'llevar', 'tomar', 'mirar', 'esperar', 'buscar', 'necesitar', 'comprender',
    'creer', 'recibir', 'decidir', 'subir', 'ayudar', 'cambiar', 'entrar',
    'levantar', 'lavar', 'correr', 'vender', 'responder', 'partir',
]


def load_json(file):
    with open(file, encoding='utf-8') as f:
        return json.load(f)


def load_verb_list(file):
    """A JSON list of infinitives, or a text file with one infinitive per line."""
    if file.endswith('.json'):
        return load_json(file)
    with open(file, encoding='utf-8') as f:
        return [line.strip() for line in f if line.strip()]


def build_artifact(infinitives):
    verbs = {}
    for infinitive in sorted(set(infinitives)):
        try:
            verb_data = conjugate_verb(infinitive)
        except NotAVerbError:
            logger.warning("Skipping %r: not an -ar/-er/-ir infinitive", infinitive)
            continue
        verbs[infinitive] = [[c.form for c in tense.conjugations] for tense in verb_data.tenses]

    return {
        'language': 'spanish',
        'generatedAt': datetime.now(timezone.utc).isoformat(),
        'verbCount': len(verbs),
        'tenses': [
            {
                'tenseId': t.tense_id,
                'tenseName': t.tense_name,
                'description': t.description,
                'persons': t.persons,
            }
            for t in TENSE_DEFINITIONS
        ],
        'verbs': verbs,
    }


def write_artifact(artifact, output_path):
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(artifact, f, ensure_ascii=False, separators=(',', ':'))
    print(f"Wrote {artifact['verbCount']} verbs to {output_path}")


if __name__ == '__main__':
    logging.basicConfig(level=settings.log_level.upper())
    # Usage: python build_conjugations.py [verb_list.txt|verbs.json] [output.json]
    words = list(IRREGULAR_VERBS) + COMMON_REGULAR_VERBS
    if len(sys.argv) > 1:
        words += load_verb_list(sys.argv[1])
    output = sys.argv[2] if len(sys.argv) > 2 else settings.conjugation_data_path
    write_artifact(build_artifact(words), output)
