"""Year-based elective policy.

One table drives both which categories a class year can see and which ones a
student must fill before locking. Tuple order is the order missing categories
are reported in.
"""

from typing import Dict, Tuple

from acadtrack.core.enums import ElectiveCategory

ELECTIVES_BY_YEAR: Dict[int, Tuple[ElectiveCategory, ...]] = {
    2: (ElectiveCategory.OE, ElectiveCategory.MDM),
    3: (ElectiveCategory.OE, ElectiveCategory.MDM, ElectiveCategory.PE),
    4: (ElectiveCategory.OE, ElectiveCategory.PE),
}


def visible_categories(class_year: int) -> Tuple[ElectiveCategory, ...]:
    return ELECTIVES_BY_YEAR.get(class_year, ())


def required_categories(class_year: int) -> Tuple[ElectiveCategory, ...]:
    return ELECTIVES_BY_YEAR.get(class_year, ())


def is_visible(category: ElectiveCategory, class_year: int) -> bool:
    return category in visible_categories(class_year)
