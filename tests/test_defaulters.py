from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.api.v1.defaulters import service
from acadtrack.api.v1.defaulters.schemas import DefaulterWorkAssign
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.models import DefaulterSubmission


async def _setup(seed):
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    other = await seed.school_class(dept, year=2, name="B")
    faculty = await seed.user("Asha Rao")
    subject = await seed.subject("Open Elective - Economics", "OE201", cl=cl)
    await seed.assign(faculty, subject, cl=cl)
    s1 = await seed.student(cl, 1, defaulter=True)
    s2 = await seed.student(cl, 2)
    s3 = await seed.student(cl, 3, defaulter=True)
    outsider = await seed.student(other, 4, defaulter=True)
    await seed.selection(outsider, oe_id=subject.id, oe_faculty_id=faculty.id)
    return cl, faculty, subject, (s1, s2, s3, outsider)


@pytest.mark.asyncio
async def test_targets_are_defaulters_among_enrolled(db_session: AsyncSession, seed) -> None:
    cl, faculty, subject, (s1, s2, s3, outsider) = await _setup(seed)

    as_faculty = ActorContext(id=faculty.id, role="faculty")
    assert await service.defaulter_targets(db_session, as_faculty, subject.id) == [s1.id, s3.id, outsider.id]

    as_class_teacher = ActorContext(id=faculty.id, role="class_teacher", class_id=cl.id)
    assert await service.defaulter_targets(db_session, as_class_teacher, subject.id) == [s1.id, s3.id]


@pytest.mark.asyncio
async def test_assign_appends_rows_and_lists_latest(db_session: AsyncSession, seed) -> None:
    cl, faculty, subject, students = await _setup(seed)
    actor = ActorContext(id=faculty.id, role="faculty")

    first = await service.assign_defaulter_work(
        db_session, actor, DefaulterWorkAssign(subject_id=subject.id, instruction_text="Write a report")
    )
    assert first.total_assigned == 3

    second = await service.assign_defaulter_work(db_session, actor, DefaulterWorkAssign(subject_id=subject.id, skip=True))
    assert second.total_assigned == 3

    count = await db_session.scalar(select(func.count(DefaulterSubmission.id)))
    assert count == 6

    listing = await service.list_defaulter_work(db_session, faculty.id)
    assert len(listing.submissions) == 1
    assert listing.submissions[0].skip is True
    assert listing.submissions[0].submission_text == "Skipped by faculty"


@pytest.mark.asyncio
async def test_assign_without_defaulters(db_session: AsyncSession, seed) -> None:
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    faculty = await seed.user("Asha Rao")
    subject = await seed.subject("Operating Systems", "CS201", cl=cl)
    await seed.assign(faculty, subject, cl=cl)
    await seed.student(cl, 1)

    response = await service.assign_defaulter_work(
        db_session, ActorContext(id=faculty.id, role="faculty"), DefaulterWorkAssign(subject_id=subject.id)
    )

    assert response.success is True
    assert response.total_assigned == 0
    assert response.message == "No defaulter students found for this subject."


@pytest.mark.asyncio
async def test_default_instruction_text(db_session: AsyncSession, seed) -> None:
    cl, faculty, subject, (s1, *_) = await _setup(seed)

    await service.assign_defaulter_work(
        db_session, ActorContext(id=faculty.id, role="faculty"), DefaulterWorkAssign(subject_id=subject.id)
    )

    row = await db_session.scalar(select(DefaulterSubmission).where(DefaulterSubmission.student_id == s1.id))
    assert row.submission_text == "No instructions provided."
    assert row.skip is False


@pytest.mark.asyncio
async def test_delete_defaulter_work(client: AsyncClient, db_session: AsyncSession, seed, login) -> None:
    cl, faculty, subject, students = await _setup(seed)
    await db_session.commit()
    login(ActorContext(id=faculty.id, role="faculty"))

    created = await client.post("/api/v1/defaulter-work", json={"subject_id": str(subject.id)})
    assert created.status_code == 201
    assert created.json()["total_assigned"] == 3

    deleted = await client.delete(f"/api/v1/defaulter-work/subjects/{subject.id}")
    assert deleted.status_code == 200

    count = await db_session.scalar(select(func.count(DefaulterSubmission.id)))
    assert count == 0


@pytest.mark.asyncio
async def test_student_view_filters_skips_and_other_elective_faculty(db_session: AsyncSession, seed) -> None:
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    asha = await seed.user("Asha Rao")
    vikram = await seed.user("Vikram Shah")
    theory = await seed.subject("Operating Systems", "CS201", cl=cl)
    elective = await seed.subject("Psychology", "OE201", "oe", department=dept)
    student = await seed.student(cl, 1, defaulter=True)
    await seed.selection(student, oe_id=elective.id, oe_faculty_id=asha.id)

    now = datetime.utcnow()
    rows = [
        (theory, asha, "Theory work", False, now - timedelta(days=3)),
        (theory, asha, "Skipped by faculty", True, now - timedelta(days=2)),
        (elective, asha, "Elective work", False, now - timedelta(days=1)),
        (elective, vikram, "Not for this student", False, now),
    ]
    for subject, faculty, text, skip, created_at in rows:
        db_session.add(
            DefaulterSubmission(
                student_id=student.id,
                subject_id=subject.id,
                faculty_id=faculty.id,
                submission_text=text,
                skip=skip,
                status="pending",
                created_at=created_at,
            )
        )
    await db_session.flush()

    response = await service.student_defaulter_work(db_session, student.id)

    assert [w.description for w in response.defaulter_work] == ["Elective work", "Theory work"]
