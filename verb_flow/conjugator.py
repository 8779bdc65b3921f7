# verb_flow/conjugator.py
"""
Rule-based Spanish verb conjugation.

Regular -ar/-er/-ir rules produce every tense; the IRREGULAR_VERBS table
replaces whole tense arrays for common irregular verbs. Compound, progressive
and modal constructs are built from fixed auxiliary tables.
"""
import re
from typing import Dict, List, Optional

from verb_flow.exceptions import NotAVerbError
from verb_flow.models import ConjugationForm, TenseData, TenseDefinition, VerbData

PERSONS = [
    'yo',
    'tú',
    'él/ella/usted',
    'nosotros/as',
    'vosotros/as',
    'ellos/ellas/ustedes',
]

IMPERATIVE_PERSONS = [
    'tú',
    'usted',
    'nosotros/as',
    'vosotros/as',
    'ustedes',
]

# Output order of a conjugation table. The static artifact uses the same order.
TENSE_DEFINITIONS: List[TenseDefinition] = [
    TenseDefinition(tense_id='present', tense_name='Present',
                    description='Actions happening now, habitual actions, general truths', persons=PERSONS),
    TenseDefinition(tense_id='preterite', tense_name='Preterite',
                    description='Completed past actions with a definite endpoint', persons=PERSONS),
    TenseDefinition(tense_id='imperfect', tense_name='Imperfect',
                    description='Ongoing, habitual, or background past actions', persons=PERSONS),
    TenseDefinition(tense_id='future', tense_name='Future',
                    description='Actions that will happen, predictions, probability', persons=PERSONS),
    TenseDefinition(tense_id='conditional', tense_name='Conditional',
                    description='Hypothetical situations, polite requests, future in the past', persons=PERSONS),
    TenseDefinition(tense_id='present-subjunctive', tense_name='Present Subjunctive',
                    description='Wishes, doubts, emotions, impersonal expressions in the present', persons=PERSONS),
    TenseDefinition(tense_id='imperfect-subjunctive', tense_name='Imperfect Subjunctive',
                    description='Hypothetical or contrary-to-fact situations in the past', persons=PERSONS),
    TenseDefinition(tense_id='imperative', tense_name='Imperative',
                    description='Commands and instructions', persons=IMPERATIVE_PERSONS),
    TenseDefinition(tense_id='present-perfect', tense_name='Present Perfect',
                    description='Actions completed recently or with present relevance', persons=PERSONS),
    TenseDefinition(tense_id='pluperfect', tense_name='Pluperfect',
                    description='Actions completed before another past action', persons=PERSONS),
    TenseDefinition(tense_id='future-perfect', tense_name='Future Perfect',
                    description='Actions that will be completed before a future point', persons=PERSONS),
    TenseDefinition(tense_id='conditional-perfect', tense_name='Conditional Perfect',
                    description='Hypothetical completed actions', persons=PERSONS),
    TenseDefinition(tense_id='present-progressive', tense_name='Present Progressive',
                    description='Actions happening right now (estoy hablando)', persons=PERSONS),
    TenseDefinition(tense_id='imperfect-progressive', tense_name='Imperfect Progressive',
                    description='Ongoing past actions in progress (estaba hablando)', persons=PERSONS),
    TenseDefinition(tense_id='poder-present', tense_name='Poder + Infinitive',
                    description='Ability or possibility (puedo hablar)', persons=PERSONS),
    TenseDefinition(tense_id='deber-present', tense_name='Deber + Infinitive',
                    description='Obligation or probability (debo hablar)', persons=PERSONS),
    TenseDefinition(tense_id='future-progressive', tense_name='Future Progressive',
                    description='Actions that will be in progress (estaré hablando)', persons=PERSONS),
]

_DEFINITIONS_BY_ID: Dict[str, TenseDefinition] = {t.tense_id: t for t in TENSE_DEFINITIONS}

# Auxiliary forms of "haber" for compound tenses
HABER = {
    'present': ['he', 'has', 'ha', 'hemos', 'habéis', 'han'],
    'imperfect': ['había', 'habías', 'había', 'habíamos', 'habíais', 'habían'],
    'future': ['habré', 'habrás', 'habrá', 'habremos', 'habréis', 'habrán'],
    'conditional': ['habría', 'habrías', 'habría', 'habríamos', 'habríais', 'habrían'],
}

# Auxiliary forms of "estar" for progressive tenses
ESTAR = {
    'present': ['estoy', 'estás', 'está', 'estamos', 'estáis', 'están'],
    'imperfect': ['estaba', 'estabas', 'estaba', 'estábamos', 'estabais', 'estaban'],
    'future': ['estaré', 'estarás', 'estará', 'estaremos', 'estaréis', 'estarán'],
}

PODER_PRESENT = ['puedo', 'puedes', 'puede', 'podemos', 'podéis', 'pueden']
DEBER_PRESENT = ['debo', 'debes', 'debe', 'debemos', 'debéis', 'deben']

# --- Regular endings, indexed by verb type then person ---

PRESENT_ENDINGS = {
    'ar': ['o', 'as', 'a', 'amos', 'áis', 'an'],
    'er': ['o', 'es', 'e', 'emos', 'éis', 'en'],
    'ir': ['o', 'es', 'e', 'imos', 'ís', 'en'],
}

PRETERITE_ENDINGS = {
    'ar': ['é', 'aste', 'ó', 'amos', 'asteis', 'aron'],
    'er': ['í', 'iste', 'ió', 'imos', 'isteis', 'ieron'],
    'ir': ['í', 'iste', 'ió', 'imos', 'isteis', 'ieron'],
}

IMPERFECT_ENDINGS = {
    'ar': ['aba', 'abas', 'aba', 'ábamos', 'abais', 'aban'],
    'er': ['ía', 'ías', 'ía', 'íamos', 'íais', 'ían'],
    'ir': ['ía', 'ías', 'ía', 'íamos', 'íais', 'ían'],
}

# -ar verbs take the "e" family, -er/-ir verbs the "a" family
PRESENT_SUBJUNCTIVE_ENDINGS = {
    'ar': ['e', 'es', 'e', 'emos', 'éis', 'en'],
    'er': ['a', 'as', 'a', 'amos', 'áis', 'an'],
    'ir': ['a', 'as', 'a', 'amos', 'áis', 'an'],
}

IMPERFECT_SUBJUNCTIVE_ENDINGS = {
    'ar': ['ara', 'aras', 'ara', 'áramos', 'arais', 'aran'],
    'er': ['iera', 'ieras', 'iera', 'iéramos', 'ierais', 'ieran'],
    'ir': ['iera', 'ieras', 'iera', 'iéramos', 'ierais', 'ieran'],
}

FUTURE_ENDINGS = ['é', 'ás', 'á', 'emos', 'éis', 'án']
CONDITIONAL_ENDINGS = ['ía', 'ías', 'ía', 'íamos', 'íais', 'ían']

IMPERATIVE_TU_ENDINGS = {'ar': 'a', 'er': 'e', 'ir': 'e'}
IMPERATIVE_VOSOTROS_ENDINGS = {'ar': 'ad', 'er': 'ed', 'ir': 'id'}

IRREGULAR_GERUNDS = {
    'dormir': 'durmiendo',
    'morir': 'muriendo',
    'sentir': 'sintiendo',
    'preferir': 'prefiriendo',
    'pedir': 'pidiendo',
    'seguir': 'siguiendo',
    'servir': 'sirviendo',
    'elegir': 'eligiendo',
    'conseguir': 'consiguiendo',
    'poder': 'pudiendo',
    'venir': 'viniendo',
    'decir': 'diciendo',
    'ir': 'yendo',
    'oír': 'oyendo',
    'leer': 'leyendo',
    'caer': 'cayendo',
    'traer': 'trayendo',
    'construir': 'construyendo',
    'destruir': 'destruyendo',
    'huir': 'huyendo',
    'incluir': 'incluyendo',
    'contribuir': 'contribuyendo',
    'distribuir': 'distribuyendo',
    'sustituir': 'sustituyendo',
    'influir': 'influyendo',
    'concluir': 'concluyendo',
    'excluir': 'excluyendo',
    'creer': 'creyendo',
    'poseer': 'poseyendo',
    'proveer': 'proveyendo',
}

IRREGULAR_PARTICIPLES = {
    'abrir': 'abierto',
    'cubrir': 'cubierto',
    'decir': 'dicho',
    'descubrir': 'descubierto',
    'escribir': 'escrito',
    'hacer': 'hecho',
    'morir': 'muerto',
    'poner': 'puesto',
    'resolver': 'resuelto',
    'romper': 'roto',
    'ver': 'visto',
    'volver': 'vuelto',
    'devolver': 'devuelto',
    'envolver': 'envuelto',
    'freír': 'frito',
    'imprimir': 'impreso',
    'satisfacer': 'satisfecho',
    'componer': 'compuesto',
    'deshacer': 'deshecho',
    'disponer': 'dispuesto',
    'exponer': 'expuesto',
    'imponer': 'impuesto',
    'oponer': 'opuesto',
    'proponer': 'propuesto',
    'suponer': 'supuesto',
    'describir': 'descrito',
    'inscribir': 'inscrito',
    'prescribir': 'prescrito',
    'suscribir': 'suscrito',
    'contradecir': 'contradicho',
    'predecir': 'predicho',
    'prever': 'previsto',
    'revolver': 'revuelto',
    'descomponer': 'descompuesto',
    'rehacer': 'rehecho',
    'sobreponer': 'sobrepuesto',
    'anteponer': 'antepuesto',
    'reponer': 'repuesto',
}

# Whole-array overrides for common irregular verbs. Any key left out falls back
# to the regular rule. 'imperative' is ordered [tú, usted, nosotros, vosotros, ustedes].
IRREGULAR_VERBS: Dict[str, Dict] = {
    'ser': {
        'present': ['soy', 'eres', 'es', 'somos', 'sois', 'son'],
        'preterite': ['fui', 'fuiste', 'fue', 'fuimos', 'fuisteis', 'fueron'],
        'imperfect': ['era', 'eras', 'era', 'éramos', 'erais', 'eran'],
        'present_subjunctive': ['sea', 'seas', 'sea', 'seamos', 'seáis', 'sean'],
        'imperfect_subjunctive': ['fuera', 'fueras', 'fuera', 'fuéramos', 'fuerais', 'fueran'],
        'imperative': ['sé', 'sea', 'seamos', 'sed', 'sean'],
        'participle': 'sido',
    },
    'estar': {
        'present': ['estoy', 'estás', 'está', 'estamos', 'estáis', 'están'],
        'preterite': ['estuve', 'estuviste', 'estuvo', 'estuvimos', 'estuvisteis', 'estuvieron'],
        'present_subjunctive': ['esté', 'estés', 'esté', 'estemos', 'estéis', 'estén'],
        'imperfect_subjunctive': ['estuviera', 'estuvieras', 'estuviera', 'estuviéramos', 'estuvierais', 'estuvieran'],
        'imperative': ['está', 'esté', 'estemos', 'estad', 'estén'],
        'participle': 'estado',
    },
    'haber': {
        'present': ['he', 'has', 'ha', 'hemos', 'habéis', 'han'],
        'preterite': ['hube', 'hubiste', 'hubo', 'hubimos', 'hubisteis', 'hubieron'],
        'future_stem': 'habr',
        'present_subjunctive': ['haya', 'hayas', 'haya', 'hayamos', 'hayáis', 'hayan'],
        'imperfect_subjunctive': ['hubiera', 'hubieras', 'hubiera', 'hubiéramos', 'hubierais', 'hubieran'],
        'imperative': ['he', 'haya', 'hayamos', 'habed', 'hayan'],
        'participle': 'habido',
    },
    'tener': {
        'present': ['tengo', 'tienes', 'tiene', 'tenemos', 'tenéis', 'tienen'],
        'preterite': ['tuve', 'tuviste', 'tuvo', 'tuvimos', 'tuvisteis', 'tuvieron'],
        'future_stem': 'tendr',
        'present_subjunctive': ['tenga', 'tengas', 'tenga', 'tengamos', 'tengáis', 'tengan'],
        'imperfect_subjunctive': ['tuviera', 'tuvieras', 'tuviera', 'tuviéramos', 'tuvierais', 'tuvieran'],
        'imperative': ['ten', 'tenga', 'tengamos', 'tened', 'tengan'],
        'participle': 'tenido',
    },
    'hacer': {
        'present': ['hago', 'haces', 'hace', 'hacemos', 'hacéis', 'hacen'],
        'preterite': ['hice', 'hiciste', 'hizo', 'hicimos', 'hicisteis', 'hicieron'],
        'future_stem': 'har',
        'present_subjunctive': ['haga', 'hagas', 'haga', 'hagamos', 'hagáis', 'hagan'],
        'imperfect_subjunctive': ['hiciera', 'hicieras', 'hiciera', 'hiciéramos', 'hicierais', 'hicieran'],
        'imperative': ['haz', 'haga', 'hagamos', 'haced', 'hagan'],
        'participle': 'hecho',
    },
    'ir': {
        'present': ['voy', 'vas', 'va', 'vamos', 'vais', 'van'],
        'preterite': ['fui', 'fuiste', 'fue', 'fuimos', 'fuisteis', 'fueron'],
        'imperfect': ['iba', 'ibas', 'iba', 'íbamos', 'ibais', 'iban'],
        'present_subjunctive': ['vaya', 'vayas', 'vaya', 'vayamos', 'vayáis', 'vayan'],
        'imperfect_subjunctive': ['fuera', 'fueras', 'fuera', 'fuéramos', 'fuerais', 'fueran'],
        'imperative': ['ve', 'vaya', 'vayamos', 'id', 'vayan'],
        'participle': 'ido',
    },
    'poder': {
        'present': ['puedo', 'puedes', 'puede', 'podemos', 'podéis', 'pueden'],
        'preterite': ['pude', 'pudiste', 'pudo', 'pudimos', 'pudisteis', 'pudieron'],
        'future_stem': 'podr',
        'present_subjunctive': ['pueda', 'puedas', 'pueda', 'podamos', 'podáis', 'puedan'],
        'imperfect_subjunctive': ['pudiera', 'pudieras', 'pudiera', 'pudiéramos', 'pudierais', 'pudieran'],
        'participle': 'podido',
    },
    'decir': {
        'present': ['digo', 'dices', 'dice', 'decimos', 'decís', 'dicen'],
        'preterite': ['dije', 'dijiste', 'dijo', 'dijimos', 'dijisteis', 'dijeron'],
        'future_stem': 'dir',
        'present_subjunctive': ['diga', 'digas', 'diga', 'digamos', 'digáis', 'digan'],
        'imperfect_subjunctive': ['dijera', 'dijeras', 'dijera', 'dijéramos', 'dijerais', 'dijeran'],
        'imperative': ['di', 'diga', 'digamos', 'decid', 'digan'],
        'participle': 'dicho',
    },
    'querer': {
        'present': ['quiero', 'quieres', 'quiere', 'queremos', 'queréis', 'quieren'],
        'preterite': ['quise', 'quisiste', 'quiso', 'quisimos', 'quisisteis', 'quisieron'],
        'future_stem': 'querr',
        'present_subjunctive': ['quiera', 'quieras', 'quiera', 'queramos', 'queráis', 'quieran'],
        'imperfect_subjunctive': ['quisiera', 'quisieras', 'quisiera', 'quisiéramos', 'quisierais', 'quisieran'],
        'imperative': ['quiere', 'quiera', 'queramos', 'quered', 'quieran'],
        'participle': 'querido',
    },
    'venir': {
        'present': ['vengo', 'vienes', 'viene', 'venimos', 'venís', 'vienen'],
        'preterite': ['vine', 'viniste', 'vino', 'vinimos', 'vinisteis', 'vinieron'],
        'future_stem': 'vendr',
        'present_subjunctive': ['venga', 'vengas', 'venga', 'vengamos', 'vengáis', 'vengan'],
        'imperfect_subjunctive': ['viniera', 'vinieras', 'viniera', 'viniéramos', 'vinierais', 'vinieran'],
        'imperative': ['ven', 'venga', 'vengamos', 'venid', 'vengan'],
        'participle': 'venido',
    },
    'dar': {
        'present': ['doy', 'das', 'da', 'damos', 'dais', 'dan'],
        'preterite': ['di', 'diste', 'dio', 'dimos', 'disteis', 'dieron'],
        'present_subjunctive': ['dé', 'des', 'dé', 'demos', 'deis', 'den'],
        'imperfect_subjunctive': ['diera', 'dieras', 'diera', 'diéramos', 'dierais', 'dieran'],
        'imperative': ['da', 'dé', 'demos', 'dad', 'den'],
        'participle': 'dado',
    },
    'saber': {
        'present': ['sé', 'sabes', 'sabe', 'sabemos', 'sabéis', 'saben'],
        'preterite': ['supe', 'supiste', 'supo', 'supimos', 'supisteis', 'supieron'],
        'future_stem': 'sabr',
        'present_subjunctive': ['sepa', 'sepas', 'sepa', 'sepamos', 'sepáis', 'sepan'],
        'imperfect_subjunctive': ['supiera', 'supieras', 'supiera', 'supiéramos', 'supierais', 'supieran'],
        'imperative': ['sabe', 'sepa', 'sepamos', 'sabed', 'sepan'],
        'participle': 'sabido',
    },
    'poner': {
        'present': ['pongo', 'pones', 'pone', 'ponemos', 'ponéis', 'ponen'],
        'preterite': ['puse', 'pusiste', 'puso', 'pusimos', 'pusisteis', 'pusieron'],
        'future_stem': 'pondr',
        'present_subjunctive': ['ponga', 'pongas', 'ponga', 'pongamos', 'pongáis', 'pongan'],
        'imperfect_subjunctive': ['pusiera', 'pusieras', 'pusiera', 'pusiéramos', 'pusierais', 'pusieran'],
        'imperative': ['pon', 'ponga', 'pongamos', 'poned', 'pongan'],
        'participle': 'puesto',
    },
    'salir': {
        'present': ['salgo', 'sales', 'sale', 'salimos', 'salís', 'salen'],
        'future_stem': 'saldr',
        'present_subjunctive': ['salga', 'salgas', 'salga', 'salgamos', 'salgáis', 'salgan'],
        'imperative': ['sal', 'salga', 'salgamos', 'salid', 'salgan'],
        'participle': 'salido',
    },
    'ver': {
        'present': ['veo', 'ves', 've', 'vemos', 'veis', 'ven'],
        'preterite': ['vi', 'viste', 'vio', 'vimos', 'visteis', 'vieron'],
        'imperfect': ['veía', 'veías', 'veía', 'veíamos', 'veíais', 'veían'],
        'present_subjunctive': ['vea', 'veas', 'vea', 'veamos', 'veáis', 'vean'],
        'imperfect_subjunctive': ['viera', 'vieras', 'viera', 'viéramos', 'vierais', 'vieran'],
        'imperative': ['ve', 'vea', 'veamos', 'ved', 'vean'],
        'participle': 'visto',
    },
    'conocer': {
        'present': ['conozco', 'conoces', 'conoce', 'conocemos', 'conocéis', 'conocen'],
        'present_subjunctive': ['conozca', 'conozcas', 'conozca', 'conozcamos', 'conozcáis', 'conozcan'],
        'participle': 'conocido',
    },
    'sentir': {
        'present': ['siento', 'sientes', 'siente', 'sentimos', 'sentís', 'sienten'],
        'preterite': ['sentí', 'sentiste', 'sintió', 'sentimos', 'sentisteis', 'sintieron'],
        'present_subjunctive': ['sienta', 'sientas', 'sienta', 'sintamos', 'sintáis', 'sientan'],
        'imperfect_subjunctive': ['sintiera', 'sintieras', 'sintiera', 'sintiéramos', 'sintierais', 'sintieran'],
        'imperative': ['siente', 'sienta', 'sintamos', 'sentid', 'sientan'],
        'participle': 'sentido',
    },
    'dormir': {
        'present': ['duermo', 'duermes', 'duerme', 'dormimos', 'dormís', 'duermen'],
        'preterite': ['dormí', 'dormiste', 'durmió', 'dormimos', 'dormisteis', 'durmieron'],
        'present_subjunctive': ['duerma', 'duermas', 'duerma', 'durmamos', 'durmáis', 'duerman'],
        'imperfect_subjunctive': ['durmiera', 'durmieras', 'durmiera', 'durmiéramos', 'durmierais', 'durmieran'],
        'imperative': ['duerme', 'duerma', 'durmamos', 'dormid', 'duerman'],
        'participle': 'dormido',
    },
    'pedir': {
        'present': ['pido', 'pides', 'pide', 'pedimos', 'pedís', 'piden'],
        'preterite': ['pedí', 'pediste', 'pidió', 'pedimos', 'pedisteis', 'pidieron'],
        'present_subjunctive': ['pida', 'pidas', 'pida', 'pidamos', 'pidáis', 'pidan'],
        'imperfect_subjunctive': ['pidiera', 'pidieras', 'pidiera', 'pidiéramos', 'pidierais', 'pidieran'],
        'imperative': ['pide', 'pida', 'pidamos', 'pedid', 'pidan'],
        'participle': 'pedido',
    },
    'pensar': {
        'present': ['pienso', 'piensas', 'piensa', 'pensamos', 'pensáis', 'piensan'],
        'present_subjunctive': ['piense', 'pienses', 'piense', 'pensemos', 'penséis', 'piensen'],
        'imperative': ['piensa', 'piense', 'pensemos', 'pensad', 'piensen'],
        'participle': 'pensado',
    },
    'volver': {
        'present': ['vuelvo', 'vuelves', 'vuelve', 'volvemos', 'volvéis', 'vuelven'],
        'present_subjunctive': ['vuelva', 'vuelvas', 'vuelva', 'volvamos', 'volváis', 'vuelvan'],
        'imperative': ['vuelve', 'vuelva', 'volvamos', 'volved', 'vuelvan'],
        'participle': 'vuelto',
    },
    'seguir': {
        'present': ['sigo', 'sigues', 'sigue', 'seguimos', 'seguís', 'siguen'],
        'preterite': ['seguí', 'seguiste', 'siguió', 'seguimos', 'seguisteis', 'siguieron'],
        'present_subjunctive': ['siga', 'sigas', 'siga', 'sigamos', 'sigáis', 'sigan'],
        'imperfect_subjunctive': ['siguiera', 'siguieras', 'siguiera', 'siguiéramos', 'siguierais', 'siguieran'],
        'imperative': ['sigue', 'siga', 'sigamos', 'seguid', 'sigan'],
        'participle': 'seguido',
    },
    'encontrar': {
        'present': ['encuentro', 'encuentras', 'encuentra', 'encontramos', 'encontráis', 'encuentran'],
        'present_subjunctive': ['encuentre', 'encuentres', 'encuentre', 'encontremos', 'encontréis', 'encuentren'],
        'imperative': ['encuentra', 'encuentre', 'encontremos', 'encontrad', 'encuentren'],
        'participle': 'encontrado',
    },
    'traer': {
        'present': ['traigo', 'traes', 'trae', 'traemos', 'traéis', 'traen'],
        'preterite': ['traje', 'trajiste', 'trajo', 'trajimos', 'trajisteis', 'trajeron'],
        'present_subjunctive': ['traiga', 'traigas', 'traiga', 'traigamos', 'traigáis', 'traigan'],
        'imperfect_subjunctive': ['trajera', 'trajeras', 'trajera', 'trajéramos', 'trajerais', 'trajeran'],
        'imperative': ['trae', 'traiga', 'traigamos', 'traed', 'traigan'],
        'participle': 'traído',
    },
    'caer': {
        'present': ['caigo', 'caes', 'cae', 'caemos', 'caéis', 'caen'],
        'preterite': ['caí', 'caíste', 'cayó', 'caímos', 'caísteis', 'cayeron'],
        'present_subjunctive': ['caiga', 'caigas', 'caiga', 'caigamos', 'caigáis', 'caigan'],
        'imperfect_subjunctive': ['cayera', 'cayeras', 'cayera', 'cayéramos', 'cayerais', 'cayeran'],
        'imperative': ['cae', 'caiga', 'caigamos', 'caed', 'caigan'],
        'participle': 'caído',
    },
    'oír': {
        'present': ['oigo', 'oyes', 'oye', 'oímos', 'oís', 'oyen'],
        'preterite': ['oí', 'oíste', 'oyó', 'oímos', 'oísteis', 'oyeron'],
        'present_subjunctive': ['oiga', 'oigas', 'oiga', 'oigamos', 'oigáis', 'oigan'],
        'imperfect_subjunctive': ['oyera', 'oyeras', 'oyera', 'oyéramos', 'oyerais', 'oyeran'],
        'imperative': ['oye', 'oiga', 'oigamos', 'oíd', 'oigan'],
        'participle': 'oído',
    },
    'conducir': {
        'present': ['conduzco', 'conduces', 'conduce', 'conducimos', 'conducís', 'conducen'],
        'preterite': ['conduje', 'condujiste', 'condujo', 'condujimos', 'condujisteis', 'condujeron'],
        'present_subjunctive': ['conduzca', 'conduzcas', 'conduzca', 'conduzcamos', 'conduzcáis', 'conduzcan'],
        'imperfect_subjunctive': ['condujera', 'condujeras', 'condujera', 'condujéramos', 'condujerais', 'condujeran'],
        'imperative': ['conduce', 'conduzca', 'conduzcamos', 'conducid', 'conduzcan'],
        'participle': 'conducido',
    },
    'contar': {
        'present': ['cuento', 'cuentas', 'cuenta', 'contamos', 'contáis', 'cuentan'],
        'present_subjunctive': ['cuente', 'cuentes', 'cuente', 'contemos', 'contéis', 'cuenten'],
        'imperative': ['cuenta', 'cuente', 'contemos', 'contad', 'cuenten'],
        'participle': 'contado',
    },
    'empezar': {
        'present': ['empiezo', 'empiezas', 'empieza', 'empezamos', 'empezáis', 'empiezan'],
        'preterite': ['empecé', 'empezaste', 'empezó', 'empezamos', 'empezasteis', 'empezaron'],
        'present_subjunctive': ['empiece', 'empieces', 'empiece', 'empecemos', 'empecéis', 'empiecen'],
        'imperative': ['empieza', 'empiece', 'empecemos', 'empezad', 'empiecen'],
        'participle': 'empezado',
    },
    'morir': {
        'present': ['muero', 'mueres', 'muere', 'morimos', 'morís', 'mueren'],
        'preterite': ['morí', 'moriste', 'murió', 'morimos', 'moristeis', 'murieron'],
        'present_subjunctive': ['muera', 'mueras', 'muera', 'muramos', 'muráis', 'mueran'],
        'imperfect_subjunctive': ['muriera', 'murieras', 'muriera', 'muriéramos', 'murierais', 'murieran'],
        'imperative': ['muere', 'muera', 'muramos', 'morid', 'mueran'],
        'participle': 'muerto',
    },
    'jugar': {
        'present': ['juego', 'juegas', 'juega', 'jugamos', 'jugáis', 'juegan'],
        'preterite': ['jugué', 'jugaste', 'jugó', 'jugamos', 'jugasteis', 'jugaron'],
        'present_subjunctive': ['juegue', 'juegues', 'juegue', 'juguemos', 'juguéis', 'jueguen'],
        'imperative': ['juega', 'juegue', 'juguemos', 'jugad', 'jueguen'],
        'participle': 'jugado',
    },
    'entender': {
        'present': ['entiendo', 'entiendes', 'entiende', 'entendemos', 'entendéis', 'entienden'],
        'present_subjunctive': ['entienda', 'entiendas', 'entienda', 'entendamos', 'entendáis', 'entiendan'],
        'imperative': ['entiende', 'entienda', 'entendamos', 'entended', 'entiendan'],
        'participle': 'entendido',
    },
    'recordar': {
        'present': ['recuerdo', 'recuerdas', 'recuerda', 'recordamos', 'recordáis', 'recuerdan'],
        'present_subjunctive': ['recuerde', 'recuerdes', 'recuerde', 'recordemos', 'recordéis', 'recuerden'],
        'imperative': ['recuerda', 'recuerde', 'recordemos', 'recordad', 'recuerden'],
        'participle': 'recordado',
    },
    'perder': {
        'present': ['pierdo', 'pierdes', 'pierde', 'perdemos', 'perdéis', 'pierden'],
        'present_subjunctive': ['pierda', 'pierdas', 'pierda', 'perdamos', 'perdáis', 'pierdan'],
        'imperative': ['pierde', 'pierda', 'perdamos', 'perded', 'pierdan'],
        'participle': 'perdido',
    },
    'mover': {
        'present': ['muevo', 'mueves', 'mueve', 'movemos', 'movéis', 'mueven'],
        'present_subjunctive': ['mueva', 'muevas', 'mueva', 'movamos', 'mováis', 'muevan'],
        'imperative': ['mueve', 'mueva', 'movamos', 'moved', 'muevan'],
        'participle': 'movido',
    },
    'mostrar': {
        'present': ['muestro', 'muestras', 'muestra', 'mostramos', 'mostráis', 'muestran'],
        'present_subjunctive': ['muestre', 'muestres', 'muestre', 'mostremos', 'mostréis', 'muestren'],
        'imperative': ['muestra', 'muestre', 'mostremos', 'mostrad', 'muestren'],
        'participle': 'mostrado',
    },
    'servir': {
        'present': ['sirvo', 'sirves', 'sirve', 'servimos', 'servís', 'sirven'],
        'preterite': ['serví', 'serviste', 'sirvió', 'servimos', 'servisteis', 'sirvieron'],
        'present_subjunctive': ['sirva', 'sirvas', 'sirva', 'sirvamos', 'sirváis', 'sirvan'],
        'imperfect_subjunctive': ['sirviera', 'sirvieras', 'sirviera', 'sirviéramos', 'sirvierais', 'sirvieran'],
        'imperative': ['sirve', 'sirva', 'sirvamos', 'servid', 'sirvan'],
        'participle': 'servido',
    },
    'elegir': {
        'present': ['elijo', 'eliges', 'elige', 'elegimos', 'elegís', 'eligen'],
        'preterite': ['elegí', 'elegiste', 'eligió', 'elegimos', 'elegisteis', 'eligieron'],
        'present_subjunctive': ['elija', 'elijas', 'elija', 'elijamos', 'elijáis', 'elijan'],
        'imperfect_subjunctive': ['eligiera', 'eligieras', 'eligiera', 'eligiéramos', 'eligierais', 'eligieran'],
        'imperative': ['elige', 'elija', 'elijamos', 'elegid', 'elijan'],
        'participle': 'elegido',
    },
    'escribir': {
        'participle': 'escrito',
    },
    'abrir': {
        'participle': 'abierto',
    },
    'cubrir': {
        'participle': 'cubierto',
    },
    'romper': {
        'participle': 'roto',
    },
    'resolver': {
        'present': ['resuelvo', 'resuelves', 'resuelve', 'resolvemos', 'resolvéis', 'resuelven'],
        'present_subjunctive': ['resuelva', 'resuelvas', 'resuelva', 'resolvamos', 'resolváis', 'resuelvan'],
        'imperative': ['resuelve', 'resuelva', 'resolvamos', 'resolved', 'resuelvan'],
        'participle': 'resuelto',
    },
    'producir': {
        'present': ['produzco', 'produces', 'produce', 'producimos', 'producís', 'producen'],
        'preterite': ['produje', 'produjiste', 'produjo', 'produjimos', 'produjisteis', 'produjeron'],
        'present_subjunctive': ['produzca', 'produzcas', 'produzca', 'produzcamos', 'produzcáis', 'produzcan'],
        'imperfect_subjunctive': ['produjera', 'produjeras', 'produjera', 'produjéramos', 'produjerais', 'produjeran'],
        'participle': 'producido',
    },
    'conseguir': {
        'present': ['consigo', 'consigues', 'consigue', 'conseguimos', 'conseguís', 'consiguen'],
        'preterite': ['conseguí', 'conseguiste', 'consiguió', 'conseguimos', 'conseguisteis', 'consiguieron'],
        'present_subjunctive': ['consiga', 'consigas', 'consiga', 'consigamos', 'consigáis', 'consigan'],
        'imperfect_subjunctive': ['consiguiera', 'consiguieras', 'consiguiera', 'consiguiéramos', 'consiguierais', 'consiguieran'],
        'imperative': ['consigue', 'consiga', 'consigamos', 'conseguid', 'consigan'],
        'participle': 'conseguido',
    },
    'preferir': {
        'present': ['prefiero', 'prefieres', 'prefiere', 'preferimos', 'preferís', 'prefieren'],
        'preterite': ['preferí', 'preferiste', 'prefirió', 'preferimos', 'preferisteis', 'prefirieron'],
        'present_subjunctive': ['prefiera', 'prefieras', 'prefiera', 'prefiramos', 'prefiráis', 'prefieran'],
        'imperfect_subjunctive': ['prefiriera', 'prefirieras', 'prefiriera', 'prefiriéramos', 'prefirierais', 'prefirieran'],
        'imperative': ['prefiere', 'prefiera', 'prefiramos', 'preferid', 'prefieran'],
        'participle': 'preferido',
    },
    'comenzar': {
        'present': ['comienzo', 'comienzas', 'comienza', 'comenzamos', 'comenzáis', 'comienzan'],
        'preterite': ['comencé', 'comenzaste', 'comenzó', 'comenzamos', 'comenzasteis', 'comenzaron'],
        'present_subjunctive': ['comience', 'comiences', 'comience', 'comencemos', 'comencéis', 'comiencen'],
        'imperative': ['comienza', 'comience', 'comencemos', 'comenzad', 'comiencen'],
        'participle': 'comenzado',
    },
}

_ENDS_IN_VOWEL = re.compile(r'[aeiouáéíóú]$')


def get_verb_type(infinitive: str) -> Optional[str]:
    # oír, reír and freír carry the accent on the ending
    if infinitive.endswith('ír'):
        return 'ir'
    for verb_type in ('ar', 'er', 'ir'):
        if infinitive.endswith(verb_type):
            return verb_type
    return None


def get_stem(infinitive: str) -> str:
    return infinitive[:-2]


def is_irregular(infinitive: str) -> bool:
    """True when the verb has hardcoded irregular data."""
    return infinitive in IRREGULAR_VERBS


def get_participle(infinitive: str) -> str:
    overrides = IRREGULAR_VERBS.get(infinitive, {})
    if 'participle' in overrides:
        return overrides['participle']
    if infinitive in IRREGULAR_PARTICIPLES:
        return IRREGULAR_PARTICIPLES[infinitive]
    suffix = 'ado' if get_verb_type(infinitive) == 'ar' else 'ido'
    return get_stem(infinitive) + suffix


def get_gerund(infinitive: str) -> str:
    if infinitive in IRREGULAR_GERUNDS:
        return IRREGULAR_GERUNDS[infinitive]
    stem = get_stem(infinitive)
    if get_verb_type(infinitive) == 'ar':
        return stem + 'ando'
    # -er/-ir stems ending in a vowel take -yendo (leer -> leyendo)
    if _ENDS_IN_VOWEL.search(stem):
        return stem + 'yendo'
    return stem + 'iendo'


def default_construct_checklist() -> Dict[str, bool]:
    """Only the present tense is enabled on a fresh deck."""
    return {t.tense_id: t.tense_id == 'present' for t in TENSE_DEFINITIONS}


def _with_endings(base: str, endings: List[str]) -> List[str]:
    return [base + ending for ending in endings]


def _regular_imperative(stem: str, verb_type: str, present_subjunctive: List[str]) -> List[str]:
    # usted, nosotros and ustedes are taken from the present subjunctive
    return [
        stem + IMPERATIVE_TU_ENDINGS[verb_type],
        present_subjunctive[2],
        present_subjunctive[3],
        stem + IMPERATIVE_VOSOTROS_ENDINGS[verb_type],
        present_subjunctive[5],
    ]


def _make_tense(tense_id: str, forms: List[str]) -> TenseData:
    definition = _DEFINITIONS_BY_ID[tense_id]
    return TenseData(
        tense_id=tense_id,
        tense_name=definition.tense_name,
        description=definition.description,
        conjugations=[
            ConjugationForm(person=person, form=forms[i])
            for i, person in enumerate(definition.persons)
        ],
    )


def _combine(auxiliaries: List[str], complement: str) -> List[str]:
    return [f"{aux} {complement}" for aux in auxiliaries]


def conjugate_verb(infinitive: str) -> VerbData:
    """
    Builds the full conjugation table for an infinitive.
    Irregular overrides replace whole tense arrays; anything not overridden
    follows the regular rules. Raises NotAVerbError for non -ar/-er/-ir input.
    """
    verb_type = get_verb_type(infinitive)
    if verb_type is None:
        raise NotAVerbError(infinitive)

    stem = get_stem(infinitive)
    overrides = IRREGULAR_VERBS.get(infinitive, {})
    participle = get_participle(infinitive)
    gerund = get_gerund(infinitive)

    present = overrides.get('present') or _with_endings(stem, PRESENT_ENDINGS[verb_type])
    preterite = overrides.get('preterite') or _with_endings(stem, PRETERITE_ENDINGS[verb_type])
    imperfect = overrides.get('imperfect') or _with_endings(stem, IMPERFECT_ENDINGS[verb_type])

    future_base = overrides.get('future_stem') or get_stem(infinitive) + verb_type
    future = _with_endings(future_base, FUTURE_ENDINGS)
    conditional = _with_endings(future_base, CONDITIONAL_ENDINGS)

    present_subjunctive = (overrides.get('present_subjunctive')
                           or _with_endings(stem, PRESENT_SUBJUNCTIVE_ENDINGS[verb_type]))
    imperfect_subjunctive = (overrides.get('imperfect_subjunctive')
                             or _with_endings(stem, IMPERFECT_SUBJUNCTIVE_ENDINGS[verb_type]))

    # Must follow present_subjunctive: the regular imperative borrows from it.
    imperative = overrides.get('imperative') or _regular_imperative(stem, verb_type, present_subjunctive)

    forms_by_tense = {
        'present': present,
        'preterite': preterite,
        'imperfect': imperfect,
        'future': future,
        'conditional': conditional,
        'present-subjunctive': present_subjunctive,
        'imperfect-subjunctive': imperfect_subjunctive,
        'imperative': imperative,
        'present-perfect': _combine(HABER['present'], participle),
        'pluperfect': _combine(HABER['imperfect'], participle),
        'future-perfect': _combine(HABER['future'], participle),
        'conditional-perfect': _combine(HABER['conditional'], participle),
        'present-progressive': _combine(ESTAR['present'], gerund),
        'imperfect-progressive': _combine(ESTAR['imperfect'], gerund),
        'poder-present': _combine(PODER_PRESENT, infinitive),
        'deber-present': _combine(DEBER_PRESENT, infinitive),
        'future-progressive': _combine(ESTAR['future'], gerund),
    }

    return VerbData(
        infinitive=infinitive,
        language='spanish',
        tenses=[_make_tense(t.tense_id, forms_by_tense[t.tense_id]) for t in TENSE_DEFINITIONS],
    )
