import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.auth.schemas import ActorContext
from acadtrack.core.electives_policy import visible_categories
from acadtrack.core.enums import AssignmentSource, ElectiveCategory, STAFF_ROLES, SubjectType, UserRole
from acadtrack.core.exceptions import ConflictError, ValidationError
from acadtrack.core.models import (
    Batch,
    FacultyAvailability,
    OfferedSubject,
    OfferedSubjectFaculty,
    Student,
    StudentSelection,
    Subject,
    SubjectAssignment,
)
from acadtrack.core.services import faculty_names, get_class_or_404, get_student_or_404, require_class_id

from .classification import is_practical, normalize_subject_category
from .schemas import (
    AvailabilityResponse,
    AvailabilityUpdate,
    BatchRef,
    CatalogSubject,
    ClassSubjectCreate,
    ClassSubjectResponse,
    StaffCatalogResponse,
    StudentCatalogResponse,
    StudentSubject,
    SubjectOut,
)

logger = logging.getLogger(__name__)

NOT_ASSIGNED = "Not assigned"


# ----- Staff catalog -----


def merge_catalog_sources(
    sources: Iterable[Tuple[AssignmentSource, Iterable[Subject]]],
) -> "OrderedDict[UUID, Tuple[Subject, AssignmentSource]]":
    """Union subjects from several sources keyed by id. The first source to name a subject wins."""
    merged: "OrderedDict[UUID, Tuple[Subject, AssignmentSource]]" = OrderedDict()
    for source, subjects in sources:
        for subject in subjects:
            merged.setdefault(subject.id, (subject, source))
    return merged


async def _direct_links(db: AsyncSession, faculty_id: UUID) -> List[Tuple[Subject, Optional[UUID]]]:
    """Class and batch assignments of the faculty, as (subject, batch_id)."""
    result = await db.execute(
        select(Subject, SubjectAssignment.batch_id)
        .join(SubjectAssignment, SubjectAssignment.subject_id == Subject.id)
        .where(
            SubjectAssignment.faculty_id == faculty_id,
            SubjectAssignment.class_id.is_not(None),
        )
        .order_by(SubjectAssignment.created_at)
    )
    return [(row[0], row[1]) for row in result.all()]


async def _offered_subjects(db: AsyncSession, faculty_id: UUID) -> Sequence[Subject]:
    result = await db.execute(
        select(Subject)
        .join(OfferedSubject, OfferedSubject.subject_id == Subject.id)
        .join(OfferedSubjectFaculty, OfferedSubjectFaculty.offered_subject_id == OfferedSubject.id)
        .where(
            OfferedSubjectFaculty.faculty_id == faculty_id,
            OfferedSubject.is_active.is_(True),
        )
        .order_by(OfferedSubject.created_at)
    )
    return result.scalars().all()


async def _self_selected_subjects(db: AsyncSession, faculty_id: UUID) -> List[Subject]:
    """Electives students picked with this faculty as their teacher."""
    conditions = [StudentSelection.columns(c)[1] == faculty_id for c in ElectiveCategory]
    result = await db.execute(select(StudentSelection).where(or_(*conditions)))

    subject_ids: List[UUID] = []
    for selection in result.scalars().all():
        for category in ElectiveCategory:
            subject_id, selected_faculty = selection.pair(category)
            if subject_id and selected_faculty == faculty_id and subject_id not in subject_ids:
                subject_ids.append(subject_id)
    if not subject_ids:
        return []

    result = await db.execute(select(Subject).where(Subject.id.in_(subject_ids)))
    by_id = {s.id: s for s in result.scalars().all()}
    return [by_id[sid] for sid in subject_ids if sid in by_id]


async def staff_catalog(db: AsyncSession, faculty_id: UUID) -> StaffCatalogResponse:
    direct = await _direct_links(db, faculty_id)
    offered = await _offered_subjects(db, faculty_id)
    self_selected = await _self_selected_subjects(db, faculty_id)

    merged = merge_catalog_sources(
        [
            (AssignmentSource.DIRECT, [subject for subject, _ in direct]),
            (AssignmentSource.OFFERED, offered),
            (AssignmentSource.SELF_SELECTED, self_selected),
        ]
    )

    taught_batches: Dict[UUID, List[UUID]] = {}
    for subject, batch_id in direct:
        if batch_id and batch_id not in taught_batches.setdefault(subject.id, []):
            taught_batches[subject.id].append(batch_id)
    batch_names: Dict[UUID, str] = {}
    all_batch_ids = {bid for ids in taught_batches.values() for bid in ids}
    if all_batch_ids:
        result = await db.execute(select(Batch.id, Batch.name).where(Batch.id.in_(all_batch_ids)))
        batch_names = {row.id: row.name for row in result.all()}

    response = StaffCatalogResponse()
    for subject, source in merged.values():
        category = normalize_subject_category(subject.type, subject.name)
        entry = CatalogSubject(
            id=subject.id,
            name=subject.name,
            code=subject.code,
            type=category.value,
            class_id=subject.class_id,
            source=source,
        )
        if category == SubjectType.PRACTICAL:
            entry.batches = [
                BatchRef(id=bid, name=batch_names[bid])
                for bid in taught_batches.get(subject.id, [])
                if bid in batch_names
            ]
        getattr(response, category.value).append(entry)
    return response


# ----- Student catalog -----


@dataclass
class StudentSubjectLink:
    """A subject a student studies, with the faculty responsible for them."""

    subject: Subject
    category: SubjectType
    faculty_id: Optional[UUID]
    batch_id: Optional[UUID] = None


async def student_subject_links(db: AsyncSession, student: Student, class_year: int) -> List[StudentSubjectLink]:
    """
    Class subjects for the student's class, practicals narrowed to the student's
    batch, then the electives the student selected that are visible for the year.
    """
    result = await db.execute(
        select(Subject).where(Subject.class_id == student.class_id).order_by(Subject.name)
    )
    class_subjects = result.scalars().all()

    result = await db.execute(
        select(SubjectAssignment)
        .where(
            SubjectAssignment.class_id == student.class_id,
            SubjectAssignment.subject_id.is_not(None),
        )
        .order_by(SubjectAssignment.created_at)
    )
    by_subject: Dict[UUID, List[SubjectAssignment]] = {}
    for fs in result.scalars().all():
        by_subject.setdefault(fs.subject_id, []).append(fs)

    links: List[StudentSubjectLink] = []
    for subject in class_subjects:
        assignments = by_subject.get(subject.id, [])
        if is_practical(subject.type, subject.name):
            match = next(
                (a for a in assignments if a.batch_id is None or a.batch_id == student.batch_id),
                None,
            )
            if match is None:
                continue
            links.append(StudentSubjectLink(subject, SubjectType.PRACTICAL, match.faculty_id, match.batch_id))
        else:
            faculty_id = assignments[0].faculty_id if assignments else None
            links.append(StudentSubjectLink(subject, SubjectType.THEORY, faculty_id))

    result = await db.execute(select(StudentSelection).where(StudentSelection.student_id == student.id))
    selection = result.scalar_one_or_none()
    if selection is None:
        return links

    chosen: "OrderedDict[UUID, Tuple[ElectiveCategory, Optional[UUID]]]" = OrderedDict()
    for category in visible_categories(class_year):
        subject_id, faculty_id = selection.pair(category)
        if subject_id:
            chosen.setdefault(subject_id, (category, faculty_id))
    if not chosen:
        return links

    result = await db.execute(select(Subject).where(Subject.id.in_(list(chosen))))
    electives = {s.id: s for s in result.scalars().all()}
    known = {link.subject.id for link in links}
    for subject_id, (category, faculty_id) in chosen.items():
        if subject_id in electives and subject_id not in known:
            links.append(StudentSubjectLink(electives[subject_id], category.subject_type, faculty_id))
    return links


async def availability_by_subject(db: AsyncSession, subject_ids: Iterable[UUID]) -> Dict[UUID, bool]:
    ids = list(set(subject_ids))
    if not ids:
        return {}
    result = await db.execute(
        select(FacultyAvailability.subject_id, FacultyAvailability.is_available).where(
            FacultyAvailability.subject_id.in_(ids)
        )
    )
    availability: Dict[UUID, bool] = {}
    for row in result.all():
        availability[row.subject_id] = availability.get(row.subject_id, False) or bool(row.is_available)
    return availability


async def student_catalog(db: AsyncSession, student_id: UUID) -> StudentCatalogResponse:
    student = await get_student_or_404(db, student_id)
    cl = await get_class_or_404(db, student.class_id)
    links = await student_subject_links(db, student, cl.year)

    names = await faculty_names(db, (link.faculty_id for link in links))
    availability = await availability_by_subject(db, (link.subject.id for link in links))

    response = StudentCatalogResponse()
    for link in links:
        getattr(response, link.category.value).append(
            StudentSubject(
                id=link.subject.id,
                name=link.subject.name,
                code=link.subject.code,
                type=link.category.value,
                faculty=names.get(link.faculty_id, NOT_ASSIGNED),
                faculty_id=link.faculty_id,
                faculty_available=availability.get(link.subject.id, False),
                batch_id=link.batch_id,
            )
        )
    return response


async def subjects_for(db: AsyncSession, actor: ActorContext):
    """Subjects visible to the actor, bucketed as theory / practical / mdm / oe / pe."""
    if actor.role == UserRole.STUDENT.value:
        return await student_catalog(db, actor.id)
    if actor.role in STAFF_ROLES:
        return await staff_catalog(db, actor.id)
    return StaffCatalogResponse()


# ----- Class subjects -----


async def create_class_subject(
    db: AsyncSession,
    actor: ActorContext,
    payload: ClassSubjectCreate,
) -> ClassSubjectResponse:
    class_id = require_class_id(actor)
    cl = await get_class_or_404(db, class_id)
    code = payload.code.strip().upper()

    result = await db.execute(select(Subject.id).where(Subject.class_id == class_id, Subject.code == code))
    if result.scalar_one_or_none() is not None:
        raise ConflictError(f"Subject code '{code}' already exists in this class")

    if payload.type == SubjectType.PRACTICAL.value:
        batch_ids = {item.batch_id for item in payload.batches}
        result = await db.execute(select(Batch.id).where(Batch.class_id == class_id, Batch.id.in_(batch_ids)))
        if set(result.scalars().all()) != batch_ids:
            raise ValidationError("One or more batches do not belong to your class")
        pairs = [(item.faculty_id, item.batch_id) for item in payload.batches]
    else:
        pairs = [(payload.faculty_id, None)]

    try:
        subject = Subject(
            name=payload.name.strip(),
            code=code,
            type=payload.type,
            class_id=class_id,
            department_id=cl.department_id,
        )
        db.add(subject)
        await db.flush()
        for faculty_id, batch_id in pairs:
            db.add(
                SubjectAssignment(
                    faculty_id=faculty_id,
                    subject_id=subject.id,
                    class_id=class_id,
                    batch_id=batch_id,
                )
            )
        await db.commit()
        await db.refresh(subject)
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Subject code '{code}' already exists in this class")

    logger.info("Created %s subject %s in class %s with %d assignment(s)", payload.type, code, class_id, len(pairs))
    return ClassSubjectResponse(subject=SubjectOut.model_validate(subject), assignments=len(pairs))


# ----- Faculty availability -----


async def get_availability(db: AsyncSession, faculty_id: UUID) -> AvailabilityResponse:
    result = await db.execute(
        select(Subject.code, FacultyAvailability.is_available)
        .join(Subject, Subject.id == FacultyAvailability.subject_id)
        .where(FacultyAvailability.faculty_id == faculty_id)
    )
    rows = result.all()
    return AvailabilityResponse(
        is_available=any(row.is_available for row in rows),
        subject_codes=sorted({row.code for row in rows if row.is_available}),
    )


async def set_availability(
    db: AsyncSession,
    faculty_id: UUID,
    payload: AvailabilityUpdate,
) -> AvailabilityResponse:
    """Replace the faculty's availability rows with the given subject codes."""
    codes = {c.strip().upper() for c in payload.subject_codes if c and c.strip()}
    subject_ids: List[UUID] = []
    if payload.is_available and codes:
        result = await db.execute(select(Subject.id).where(Subject.code.in_(codes)))
        subject_ids = list(result.scalars().all())
        if not subject_ids:
            raise ValidationError("No subjects found for the selected codes")

    await db.execute(delete(FacultyAvailability).where(FacultyAvailability.faculty_id == faculty_id))
    for subject_id in subject_ids:
        db.add(FacultyAvailability(faculty_id=faculty_id, subject_id=subject_id, is_available=True))
    await db.commit()

    logger.info("Faculty %s availability set for %d subject(s)", faculty_id, len(subject_ids))
    return await get_availability(db, faculty_id)
