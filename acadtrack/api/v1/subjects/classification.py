"""Subject category normalisation.

Subjects carry a free-form type column; older rows stored electives as
'theory' with a descriptive name. Every bucketing decision goes through
normalize_subject_category so catalog, statistics and submission rules agree.
"""

from typing import Optional

from acadtrack.core.enums import SubjectType

_NAME_HINTS = (
    ("multidisciplinary", SubjectType.MDM),
    ("open elective", SubjectType.OE),
    ("professional elective", SubjectType.PE),
)


def normalize_subject_category(subject_type: Optional[str], name: Optional[str]) -> SubjectType:
    kind = (subject_type or "").strip().lower()
    if kind == SubjectType.PRACTICAL.value:
        return SubjectType.PRACTICAL
    if kind in (SubjectType.MDM.value, SubjectType.OE.value, SubjectType.PE.value):
        return SubjectType(kind)

    lowered = (name or "").lower()
    for hint, category in _NAME_HINTS:
        if hint in lowered:
            return category
    return SubjectType.THEORY


def is_practical(subject_type: Optional[str], name: Optional[str] = None) -> bool:
    return normalize_subject_category(subject_type, name) == SubjectType.PRACTICAL
