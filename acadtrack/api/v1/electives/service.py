"""
Elective eligibility and the student's selection lifecycle.

A selection row moves UNSET -> PARTIAL -> COMPLETE -> LOCKED. Once locked,
only a class teacher can unlock it or override its pairs.
"""

import logging
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.schemas import ActorContext
from acadtrack.core.electives_policy import is_visible, required_categories
from acadtrack.core.enums import ElectiveCategory, SelectionState
from acadtrack.core.exceptions import (
    IncompleteSelectionError,
    LockedError,
    NotFoundError,
    ValidationError,
)
from acadtrack.core.models import OfferedSubject, OfferedSubjectFaculty, SchoolClass, Student, StudentSelection, Subject
from acadtrack.core.services import (
    faculty_names,
    faculty_teaches_subject,
    get_class_or_404,
    get_student_in_class,
    get_student_or_404,
    require_class_id,
)
from acadtrack.api.v1.subjects.classification import normalize_subject_category

from .schemas import (
    ElectiveOptions,
    ElectiveSelect,
    ElectiveSubject,
    FacultyOption,
    SelectionOut,
    SelectionOverride,
    SelectionResponse,
    StudentElectivesResponse,
)

logger = logging.getLogger(__name__)

UNKNOWN_FACULTY = "Unknown Faculty"

_ELECTIVE_TYPES = {c.subject_type: c for c in ElectiveCategory}

# category -> (subject_id, faculty_id)
OverridePairs = Dict[ElectiveCategory, Tuple[Optional[UUID], Optional[UUID]]]


# ----- Eligibility -----


async def electives_for(db: AsyncSession, class_year: int, department_id: UUID) -> ElectiveOptions:
    """Active offerings for the year, filtered by the year's visible categories.
    PE is limited to the student's own department; MDM and OE are open to all departments.
    """
    result = await db.execute(
        select(OfferedSubject, Subject)
        .join(Subject, Subject.id == OfferedSubject.subject_id)
        .where(OfferedSubject.year == class_year, OfferedSubject.is_active.is_(True))
        .order_by(OfferedSubject.created_at)
    )
    rows = result.all()

    names = await faculty_names(db, (fid for offered, _ in rows for fid in offered.faculty_ids))

    options = ElectiveOptions()
    for offered, subject in rows:
        category = _ELECTIVE_TYPES.get(normalize_subject_category(subject.type, subject.name))
        if category is None or not is_visible(category, class_year):
            continue
        if category == ElectiveCategory.PE and offered.department_id != department_id:
            continue
        getattr(options, category.value.lower()).append(
            ElectiveSubject(
                id=subject.id,
                name=subject.name,
                code=subject.code,
                semester=offered.semester,
                department_id=offered.department_id,
                faculty_options=[
                    FacultyOption(id=fid, name=names.get(fid, UNKNOWN_FACULTY)) for fid in offered.faculty_ids
                ],
            )
        )
    return options


# ----- Selection state -----


def missing_categories(selection: Optional[StudentSelection], class_year: int) -> List[ElectiveCategory]:
    """Required categories with no subject chosen, in OE, MDM, PE order."""
    required = required_categories(class_year)
    if selection is None:
        return list(required)
    return [c for c in required if selection.pair(c)[0] is None]


def selection_state(selection: Optional[StudentSelection], class_year: int) -> SelectionState:
    if selection is None:
        return SelectionState.UNSET
    if selection.selections_locked:
        return SelectionState.LOCKED
    if not any(selection.pair(c)[0] for c in ElectiveCategory):
        return SelectionState.UNSET
    if missing_categories(selection, class_year):
        return SelectionState.PARTIAL
    return SelectionState.COMPLETE


async def _get_selection(db: AsyncSession, student_id: UUID) -> Optional[StudentSelection]:
    result = await db.execute(select(StudentSelection).where(StudentSelection.student_id == student_id))
    return result.scalar_one_or_none()


async def _student_and_class(db: AsyncSession, student_id: UUID) -> Tuple[Student, SchoolClass]:
    student = await get_student_or_404(db, student_id)
    cl = await get_class_or_404(db, student.class_id)
    return student, cl


def _selection_out(selection: Optional[StudentSelection]) -> SelectionOut:
    if selection is None:
        return SelectionOut()
    return SelectionOut.model_validate(selection)


def _selection_response(message: str, selection: Optional[StudentSelection], class_year: int) -> SelectionResponse:
    return SelectionResponse(
        message=message,
        state=selection_state(selection, class_year),
        selection=_selection_out(selection),
    )


# ----- Views -----


async def student_electives(db: AsyncSession, student_id: UUID) -> StudentElectivesResponse:
    student, cl = await _student_and_class(db, student_id)
    options = await electives_for(db, cl.year, cl.department_id)
    selection = await _get_selection(db, student.id)
    return StudentElectivesResponse(
        student_id=student.id,
        class_year=cl.year,
        electives=options,
        current_selection=_selection_out(selection),
        state=selection_state(selection, cl.year),
        required=list(required_categories(cl.year)),
    )


async def teacher_student_electives(
    db: AsyncSession,
    actor: ActorContext,
    student_id: UUID,
) -> StudentElectivesResponse:
    class_id = require_class_id(actor)
    await get_student_in_class(db, student_id, class_id, "You can only view students in your class")
    return await student_electives(db, student_id)


# ----- Transitions -----


async def select_elective(db: AsyncSession, student_id: UUID, payload: ElectiveSelect) -> SelectionResponse:
    student, cl = await _student_and_class(db, student_id)
    selection = await _get_selection(db, student.id)

    if selection is not None and selection.selections_locked:
        raise LockedError()

    if not await faculty_teaches_subject(db, payload.faculty_id, payload.subject_id):
        raise ValidationError("Selected faculty does not teach the given subject.")

    created = selection is None
    if created:
        selection = StudentSelection(student_id=student.id, selections_locked=False)
        db.add(selection)
    selection.set_pair(payload.category, payload.subject_id, payload.faculty_id)
    await db.commit()
    await db.refresh(selection)

    category = payload.category.value
    logger.info("Student %s selected %s subject %s (faculty %s)", student.id, category, payload.subject_id, payload.faculty_id)
    message = f"{category} subject selected successfully." if created else f"{category} subject selection updated successfully."
    return _selection_response(message, selection, cl.year)


async def lock_selections(db: AsyncSession, student_id: UUID) -> SelectionResponse:
    student, cl = await _student_and_class(db, student_id)
    selection = await _get_selection(db, student.id)
    missing = missing_categories(selection, cl.year)
    if missing:
        raise IncompleteSelectionError([c.value for c in missing])
    # only reachable without a row when the year requires nothing
    if selection is None:
        raise ValidationError("No elective selections found. Please select your elective subjects first.")

    if not selection.selections_locked:
        selection.selections_locked = True
        await db.commit()
        await db.refresh(selection)
        logger.info("Student %s locked elective selections", student.id)
    return _selection_response("Your elective selections have been locked successfully.", selection, cl.year)


async def unlock_selections(db: AsyncSession, actor: ActorContext, student_id: UUID) -> SelectionResponse:
    class_id = require_class_id(actor)
    student = await get_student_in_class(
        db, student_id, class_id, "You can only unlock selections for students in your class"
    )
    selection = await _get_selection(db, student.id)
    if selection is None:
        raise NotFoundError("No elective selections found for this student")

    selection.selections_locked = False
    await db.commit()
    await db.refresh(selection)
    cl = await get_class_or_404(db, student.class_id)
    logger.info("Selections of student %s unlocked by %s", student.id, actor.id)
    return _selection_response("Student's elective selections have been unlocked", selection, cl.year)


async def _faculty_may_teach(db: AsyncSession, faculty_id: UUID, subject_id: UUID) -> bool:
    if await faculty_teaches_subject(db, faculty_id, subject_id):
        return True
    result = await db.execute(
        select(OfferedSubject.id)
        .join(OfferedSubjectFaculty, OfferedSubjectFaculty.offered_subject_id == OfferedSubject.id)
        .where(
            OfferedSubject.subject_id == subject_id,
            OfferedSubjectFaculty.faculty_id == faculty_id,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def validate_override(db: AsyncSession, payload: SelectionOverride) -> OverridePairs:
    """Check every subject/faculty pair of an override before anything is written."""
    pairs: OverridePairs = {}
    for category in ElectiveCategory:
        prefix = category.value.lower()
        subject_id = getattr(payload, f"{prefix}_id")
        faculty_id = getattr(payload, f"{prefix}_faculty_id")
        if subject_id is not None:
            if faculty_id is None:
                raise ValidationError(f"{category.value} faculty is required when a {category.value} subject is set")
            if not await _faculty_may_teach(db, faculty_id, subject_id):
                raise ValidationError(f"Selected {category.value} faculty does not teach the given subject.")
        else:
            faculty_id = None
        pairs[category] = (subject_id, faculty_id)
    return pairs


async def stage_override(db: AsyncSession, student_id: UUID, pairs: OverridePairs) -> StudentSelection:
    """Write validated pairs into the student's selection row. The caller commits."""
    selection = await _get_selection(db, student_id)
    if selection is None:
        selection = StudentSelection(student_id=student_id, selections_locked=False)
        db.add(selection)
    for category, (subject_id, faculty_id) in pairs.items():
        selection.set_pair(category, subject_id, faculty_id)
    return selection


async def override_selections(
    db: AsyncSession,
    actor: ActorContext,
    student_id: UUID,
    payload: SelectionOverride,
) -> SelectionResponse:
    """Class-teacher edit of all three pairs. Ignores the lock and keeps it as it was."""
    class_id = require_class_id(actor)
    student = await get_student_in_class(db, student_id, class_id)

    pairs = await validate_override(db, payload)
    selection = await stage_override(db, student.id, pairs)
    await db.commit()
    await db.refresh(selection)

    cl = await get_class_or_404(db, student.class_id)
    logger.info("Selections of student %s overridden by %s", student.id, actor.id)
    return _selection_response("Student's elective selections have been updated", selection, cl.year)
