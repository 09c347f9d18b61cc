"""
Selectable condition catalog.

Each condition lists its possible schedular ratings, whether it can take the
bilateral factor, and the SMC trigger tags it carries. Tags are attached here,
when the catalog is defined, so the eligibility rules never have to
pattern-match display names.

References:
- 38 CFR Part 4 - Schedule for Rating Disabilities
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from .va_math import LimbSide


class TriggerTag(Enum):
    """Capabilities a condition contributes to SMC rules"""
    CREATIVE_ORGAN_LOSS = "creative_organ_loss"
    TRAUMATIC_BRAIN_INJURY = "traumatic_brain_injury"
    LIMB_LOSS = "limb_loss"


# Keyword fallback used for free-text conditions entered outside the catalog
TRIGGER_KEYWORDS = {
    TriggerTag.CREATIVE_ORGAN_LOSS: ("erectile dysfunction", "loss of use of creative organ"),
    TriggerTag.TRAUMATIC_BRAIN_INJURY: ("tbi", "traumatic brain injury"),
    TriggerTag.LIMB_LOSS: ("amputation", "loss of use"),
}

# Paired extremities eligible for the bilateral factor (38 CFR § 4.26)
BILATERAL_LIMB_TYPES = (
    "knee", "hip", "ankle", "foot", "shoulder", "elbow", "wrist", "hand", "arm", "leg",
)


def derive_trigger_tags(name: str) -> FrozenSet[TriggerTag]:
    """Tags implied by a condition name (case-insensitive keyword match)."""
    lowered = (name or "").lower()
    return frozenset(
        tag for tag, keywords in TRIGGER_KEYWORDS.items()
        if any(keyword in lowered for keyword in keywords)
    )


@dataclass(frozen=True)
class CatalogCondition:
    """A condition a claimant can select"""
    id: str
    name: str
    system: str
    ratings: Tuple[int, ...]
    bilateral_eligible: Optional[bool] = None
    limb_type: str = ""
    keywords: Tuple[str, ...] = ()
    tags: FrozenSet[TriggerTag] = frozenset()


@dataclass
class SelectedCondition:
    """A catalog (or free-text) condition with the claimant's selections"""
    id: str
    name: str
    ratings: Tuple[int, ...] = ()
    selected_rating: Optional[int] = None
    side: Optional[LimbSide] = None
    is_bilateral: Optional[bool] = None
    bilateral_eligible: Optional[bool] = None
    limb_type: str = ""
    tags: FrozenSet[TriggerTag] = field(default_factory=frozenset)


def _condition(id, name, system, ratings, limb_type="", bilateral_eligible=None, keywords=()):
    return CatalogCondition(
        id=id,
        name=name,
        system=system,
        ratings=tuple(ratings),
        bilateral_eligible=bilateral_eligible,
        limb_type=limb_type,
        keywords=tuple(keywords),
        tags=derive_trigger_tags(name),
    )


CONDITION_CATALOG = (
    # Mental health - 38 CFR § 4.130
    _condition('ptsd', 'PTSD', 'mental', [0, 10, 30, 50, 70, 100],
               keywords=['trauma', 'nightmares', 'flashbacks', 'hypervigilance']),
    _condition('mdd', 'Major Depressive Disorder', 'mental', [0, 10, 30, 50, 70, 100],
               keywords=['depression', 'hopeless']),
    _condition('gad', 'Generalized Anxiety Disorder', 'mental', [0, 10, 30, 50, 70, 100],
               keywords=['anxiety', 'panic', 'worry']),
    _condition('insomnia', 'Insomnia / Sleep Disorder', 'mental', [0, 10, 30, 50],
               keywords=['sleep', 'insomnia']),

    # Musculoskeletal - 38 CFR § 4.71a
    _condition('lumbar', 'Lumbar Spine (Lower Back)', 'musculoskeletal', [0, 10, 20, 40, 50, 100],
               keywords=['back', 'lower back', 'spine', 'lumbar']),
    _condition('cervical', 'Cervical Spine (Neck)', 'musculoskeletal', [0, 10, 20, 30, 40, 100],
               keywords=['neck', 'cervical', 'whiplash']),
    _condition('knee', 'Knee Condition', 'musculoskeletal', [0, 10, 20, 30, 40, 50, 60],
               limb_type='knee', bilateral_eligible=True, keywords=['knee', 'acl', 'meniscus']),
    _condition('hip', 'Hip Condition', 'musculoskeletal', [0, 10, 20, 30, 40, 90],
               limb_type='hip', bilateral_eligible=True, keywords=['hip', 'labrum']),
    _condition('shoulder', 'Shoulder Condition', 'musculoskeletal', [0, 10, 20, 30, 40],
               limb_type='shoulder', bilateral_eligible=True, keywords=['shoulder', 'rotator cuff']),
    _condition('ankle', 'Ankle Condition', 'musculoskeletal', [0, 10, 20, 40],
               limb_type='ankle', bilateral_eligible=True, keywords=['ankle', 'sprain']),
    _condition('wrist', 'Wrist Condition', 'musculoskeletal', [0, 10, 20, 30],
               limb_type='wrist', bilateral_eligible=True, keywords=['wrist']),
    _condition('elbow', 'Elbow Condition', 'musculoskeletal', [0, 10, 20, 30, 40, 50],
               limb_type='elbow', bilateral_eligible=True, keywords=['elbow']),
    _condition('flatfeet', 'Flat Feet (Pes Planus)', 'musculoskeletal', [0, 10, 20, 30, 50],
               limb_type='foot', bilateral_eligible=True, keywords=['flat feet', 'pes planus']),
    _condition('plantar', 'Plantar Fasciitis', 'musculoskeletal', [0, 10, 20],
               limb_type='foot', bilateral_eligible=True, keywords=['plantar fasciitis', 'heel pain']),
    _condition('fibro', 'Fibromyalgia', 'musculoskeletal', [10, 20, 40],
               keywords=['fibromyalgia', 'widespread pain']),

    # Limb loss - 38 CFR § 4.71a DC 5120-5167
    _condition('amputation_hand', 'Amputation (Hand)', 'musculoskeletal', [60, 70],
               limb_type='hand', bilateral_eligible=True, keywords=['amputation', 'hand']),
    _condition('amputation_foot', 'Amputation (Foot)', 'musculoskeletal', [40],
               limb_type='foot', bilateral_eligible=True, keywords=['amputation', 'foot']),
    _condition('loss_of_use_hand', 'Loss of Use (Hand)', 'musculoskeletal', [60, 70],
               limb_type='hand', bilateral_eligible=True, keywords=['loss of use', 'hand']),
    _condition('loss_of_use_foot', 'Loss of Use (Foot)', 'musculoskeletal', [40],
               limb_type='foot', bilateral_eligible=True, keywords=['loss of use', 'foot']),

    # Respiratory - 38 CFR § 4.97
    _condition('sleepapnea', 'Sleep Apnea', 'respiratory', [0, 30, 50, 100],
               keywords=['sleep apnea', 'cpap']),
    _condition('asthma', 'Asthma', 'respiratory', [10, 30, 60, 100],
               keywords=['asthma', 'inhaler']),
    _condition('sinusitis', 'Chronic Sinusitis', 'respiratory', [0, 10, 30, 50],
               keywords=['sinus', 'sinusitis']),

    # Neurological - 38 CFR § 4.124a
    _condition('tbi', 'Traumatic Brain Injury (TBI)', 'neurological', [0, 10, 40, 70, 100],
               keywords=['tbi', 'concussion', 'head injury']),
    _condition('migraines', 'Migraine Headaches', 'neurological', [0, 10, 30, 50],
               keywords=['migraine', 'headache', 'prostrating']),
    _condition('radiculopathy', 'Radiculopathy', 'neurological', [0, 10, 20, 40, 60],
               limb_type='leg', bilateral_eligible=True, keywords=['radiculopathy', 'sciatic']),
    _condition('neuropathy', 'Peripheral Neuropathy', 'neurological', [0, 10, 20, 40, 60, 80],
               limb_type='leg', bilateral_eligible=True, keywords=['neuropathy', 'numbness']),

    # Auditory - 38 CFR § 4.85-4.87
    _condition('tinnitus', 'Tinnitus', 'auditory', [10],
               keywords=['tinnitus', 'ringing']),
    _condition('hearing', 'Hearing Loss', 'auditory', [0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
               keywords=['hearing loss', 'deaf']),

    # Cardiovascular - 38 CFR § 4.104
    _condition('hypertension', 'Hypertension', 'cardiovascular', [0, 10, 20, 40, 60],
               keywords=['high blood pressure', 'hypertension']),
    _condition('cad', 'Coronary Artery Disease', 'cardiovascular', [10, 30, 60, 100],
               keywords=['heart disease', 'coronary']),

    # Digestive - 38 CFR § 4.114
    _condition('gerd', 'GERD / Acid Reflux', 'digestive', [0, 10, 30, 60],
               keywords=['gerd', 'acid reflux', 'heartburn']),
    _condition('ibs', 'Irritable Bowel Syndrome (IBS)', 'digestive', [0, 10, 30],
               keywords=['ibs', 'bowel']),

    # Genitourinary - 38 CFR § 4.115b
    _condition('ed', 'Erectile Dysfunction', 'genitourinary', [0],
               keywords=['erectile dysfunction', 'impotence']),
    _condition('kidney', 'Kidney Disease', 'genitourinary', [0, 30, 60, 80, 100],
               keywords=['kidney', 'renal']),

    # Endocrine - 38 CFR § 4.119
    _condition('diabetes2', 'Diabetes Mellitus Type II', 'endocrine', [10, 20, 40, 60, 100],
               keywords=['diabetes', 'blood sugar', 'a1c']),
    _condition('hypothyroid', 'Hypothyroidism', 'endocrine', [0, 10, 30, 60, 100],
               keywords=['thyroid', 'hypothyroid']),
)

_CATALOG_BY_ID = {condition.id: condition for condition in CONDITION_CATALOG}


def get_condition(condition_id: str) -> Optional[CatalogCondition]:
    """Look up a catalog condition by id."""
    return _CATALOG_BY_ID.get(condition_id)


def search_conditions(query: str) -> List[CatalogCondition]:
    """Conditions whose name or keywords contain the query (case-insensitive)."""
    query = (query or "").strip().lower()
    if not query:
        return list(CONDITION_CATALOG)
    return [
        condition for condition in CONDITION_CATALOG
        if query in condition.name.lower()
        or any(query in keyword for keyword in condition.keywords)
    ]


def is_bilateral_eligible(condition) -> bool:
    """
    Whether a condition can take part in the bilateral factor.

    An explicit flag wins; otherwise paired limb types qualify.
    """
    if condition.bilateral_eligible is not None:
        return condition.bilateral_eligible
    return condition.limb_type in BILATERAL_LIMB_TYPES
