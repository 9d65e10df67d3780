"""
Completion arithmetic over submission statuses.

Statuses are grouped as student_id -> subject_id -> type name -> status.
A missing entry counts as not completed.

Two per-student figures exist and are kept apart:
  * completion: share of assigned subjects that are complete
    (practical needs TA, everything else needs TA and CIE);
  * dashboard: share of completed slots, where every subject has a TA and a
    CIE slot and defaulters get an extra Defaulter work slot.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, Mapping, Sequence, Set, Tuple
from uuid import UUID

from acadtrack.core.enums import SubmissionStatus, SubmissionTypeName

TA = SubmissionTypeName.TA.value
CIE = SubmissionTypeName.CIE.value
DEFAULTER_WORK = SubmissionTypeName.DEFAULTER_WORK.value
COMPLETED = SubmissionStatus.completed.value
PENDING = SubmissionStatus.pending.value

StatusMap = Mapping[str, str]
GroupedStatuses = Dict[UUID, Dict[UUID, Dict[str, str]]]


def percentage(part: int, whole: int) -> int:
    """Rounded percentage, halves rounded up. An empty whole gives 0."""
    if whole <= 0:
        return 0
    value = Decimal(part) * 100 / Decimal(whole)
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def is_completed(statuses: StatusMap, type_name: str) -> bool:
    return statuses.get(type_name) == COMPLETED


def subject_complete(practical: bool, statuses: StatusMap) -> bool:
    if practical:
        return is_completed(statuses, TA)
    return is_completed(statuses, TA) and is_completed(statuses, CIE)


def student_completion(
    subjects: Sequence[Tuple[UUID, bool]],
    statuses_by_subject: Mapping[UUID, StatusMap],
) -> int:
    """subjects: (subject_id, is_practical) for every subject assigned to the student."""
    complete = sum(
        1 for subject_id, practical in subjects
        if subject_complete(practical, statuses_by_subject.get(subject_id, {}))
    )
    return percentage(complete, len(subjects))


def dashboard_completion(subject_statuses: Sequence[StatusMap], defaulter: bool) -> int:
    slots = (TA, CIE, DEFAULTER_WORK) if defaulter else (TA, CIE)
    completed = sum(1 for statuses in subject_statuses for slot in slots if is_completed(statuses, slot))
    return percentage(completed, len(subject_statuses) * len(slots))


def group_statuses(rows: Iterable[Tuple[UUID, UUID, str, str]]) -> GroupedStatuses:
    """rows: (student_id, subject_id, type_name, status)."""
    grouped: GroupedStatuses = {}
    for student_id, subject_id, type_name, status in rows:
        grouped.setdefault(student_id, {}).setdefault(subject_id, {})[type_name] = status
    return grouped


def marked_students(grouped: GroupedStatuses) -> Set[UUID]:
    """Students with TA and CIE both completed on at least one subject."""
    return {
        student_id
        for student_id, subjects in grouped.items()
        if any(is_completed(s, TA) and is_completed(s, CIE) for s in subjects.values())
    }


def active_students(grouped: GroupedStatuses) -> Set[UUID]:
    """Students with any TA or CIE completed."""
    return {
        student_id
        for student_id, subjects in grouped.items()
        if any(is_completed(s, TA) or is_completed(s, CIE) for s in subjects.values())
    }


def students_with_completed(grouped: GroupedStatuses, type_name: str) -> Set[UUID]:
    return {
        student_id
        for student_id, subjects in grouped.items()
        if any(is_completed(s, type_name) for s in subjects.values())
    }


@dataclass
class Rollup:
    total_students: int
    completed_students: int
    percentage: int


def rollup(student_ids: Iterable[UUID], grouped: GroupedStatuses) -> Rollup:
    """Class, department and year figure: marked students over all students."""
    ids = set(student_ids)
    completed = len(marked_students(grouped) & ids)
    return Rollup(total_students=len(ids), completed_students=completed, percentage=percentage(completed, len(ids)))


def type_counts(total: int, statuses: Iterable[str]) -> Dict[str, int]:
    """total / completed / pending / not_started for one submission type."""
    completed = pending = 0
    for status in statuses:
        if status == COMPLETED:
            completed += 1
        elif status == PENDING:
            pending += 1
    return {
        "total": total,
        "completed": completed,
        "pending": pending,
        "not_started": max(total - completed - pending, 0),
    }
