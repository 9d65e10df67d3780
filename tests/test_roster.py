from uuid import uuid4

import bcrypt
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.api.v1.batches import service as batches_service
from acadtrack.api.v1.batches.schemas import BatchCreate
from acadtrack.api.v1.electives.schemas import SelectionOverride
from acadtrack.api.v1.students import service as students_service
from acadtrack.api.v1.students.schemas import StudentImportRequest, StudentUpdate
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.exceptions import StoreError, ValidationError
from acadtrack.core.models import Batch, Student, StudentSelection, SubjectAssignment


def _teacher(cl) -> ActorContext:
    return ActorContext(id=uuid4(), role="class_teacher", class_id=cl.id)


@pytest.mark.asyncio
async def test_import_skips_duplicates(db_session: AsyncSession, seed) -> None:
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    existing = await seed.student(cl, 1)

    payload = StudentImportRequest(
        students=[
            {"roll_no": 1, "name": "Dup Roll", "hall_ticket_number": "NEW001", "attendance_percent": 90},
            {"roll_no": 2, "name": "Dup Ticket", "hall_ticket_number": existing.hall_ticket_number},
            {"roll_no": 3, "name": "Riya", "hall_ticket_number": " 21CS003 ", "attendance_percent": 80},
            {"roll_no": 3, "name": "Riya Again", "hall_ticket_number": "21CS099"},
            {"roll_no": 4, "name": "Kabir", "hall_ticket_number": "21CS004", "attendance_percent": 74.9},
        ]
    )
    response = await students_service.import_students(db_session, _teacher(cl), payload)

    assert (response.imported, response.skipped) == (2, 3)

    result = await db_session.execute(select(Student).where(Student.class_id == cl.id).order_by(Student.roll_no))
    rows = {s.roll_no: s for s in result.scalars().all()}
    assert set(rows) == {1, 3, 4}
    assert rows[3].hall_ticket_number == "21CS003"
    assert rows[3].defaulter is False
    assert rows[4].defaulter is True
    assert bcrypt.checkpw(b"21CS004", rows[4].password_hash.encode("utf-8"))


@pytest.mark.asyncio
async def test_import_with_only_duplicates(db_session: AsyncSession, seed) -> None:
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    await seed.student(cl, 1)

    response = await students_service.import_students(
        db_session,
        _teacher(cl),
        StudentImportRequest(students=[{"roll_no": 1, "name": "Again", "hall_ticket_number": "X1"}]),
    )

    assert response.imported == 0
    assert response.message == "No new students to import (all duplicates skipped)."


@pytest.mark.asyncio
async def test_import_skips_hall_ticket_registered_in_another_class(db_session: AsyncSession, seed) -> None:
    dept = await seed.department("CSE")
    first = await seed.school_class(dept, year=2, name="A")
    second = await seed.school_class(dept, year=2, name="B")
    elsewhere = await seed.student(first, 1)

    response = await students_service.import_students(
        db_session,
        _teacher(second),
        StudentImportRequest(
            students=[
                {"roll_no": 1, "name": "Riya", "hall_ticket_number": "NEW001"},
                {"roll_no": 2, "name": "Kabir", "hall_ticket_number": elsewhere.hall_ticket_number},
            ]
        ),
    )

    assert (response.imported, response.skipped) == (1, 1)
    result = await db_session.execute(select(Student.hall_ticket_number).where(Student.class_id == second.id))
    assert result.scalars().all() == ["NEW001"]


@pytest.mark.asyncio
async def test_update_student_recomputes_or_overrides_defaulter(db_session: AsyncSession, seed) -> None:
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    student = await seed.student(cl, 1)
    teacher = _teacher(cl)

    response = await students_service.update_student(
        db_session, teacher, student.id, StudentUpdate(attendance_percent=50)
    )
    assert response.student.defaulter is True

    response = await students_service.update_student(
        db_session, teacher, student.id, StudentUpdate(defaulter=False)
    )
    assert response.student.defaulter is False
    assert response.student.attendance_percent == 50


@pytest.mark.asyncio
async def test_update_student_with_bad_override_changes_nothing(db_session: AsyncSession, seed) -> None:
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    student = await seed.student(cl, 1, name="Old Name")
    await db_session.commit()

    with pytest.raises(ValidationError):
        await students_service.update_student(
            db_session,
            _teacher(cl),
            student.id,
            StudentUpdate(name="New Name", elective_selections=SelectionOverride(oe_id=uuid4(), oe_faculty_id=uuid4())),
        )

    await db_session.refresh(student)
    assert student.name == "Old Name"
    assert await db_session.scalar(select(func.count(StudentSelection.id))) == 0


@pytest.mark.asyncio
async def test_update_student_with_override_saves_both(db_session: AsyncSession, seed) -> None:
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    student = await seed.student(cl, 1, name="Old Name")
    faculty = await seed.user("Asha Rao")
    oe = await seed.subject("Psychology", "OE201", "oe", department=dept)
    await seed.assign(faculty, oe)

    response = await students_service.update_student(
        db_session,
        _teacher(cl),
        student.id,
        StudentUpdate(name="New Name", elective_selections=SelectionOverride(oe_id=oe.id, oe_faculty_id=faculty.id)),
    )

    assert response.student.name == "New Name"
    selection = await db_session.scalar(select(StudentSelection).where(StudentSelection.student_id == student.id))
    assert (selection.oe_id, selection.oe_faculty_id) == (oe.id, faculty.id)
    assert selection.selections_locked is False


@pytest.mark.asyncio
async def test_update_student_outside_class(db_session: AsyncSession, seed) -> None:
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    other = await seed.school_class(dept, year=2, name="B")
    student = await seed.student(other, 1)

    with pytest.raises(ValidationError) as exc:
        await students_service.update_student(db_session, _teacher(cl), student.id, StudentUpdate(name="X"))
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_delete_student_endpoint(client: AsyncClient, db_session: AsyncSession, seed, login) -> None:
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    student = await seed.student(cl, 1)
    await db_session.commit()
    login(_teacher(cl))

    response = await client.delete(f"/api/v1/students/{student.id}")

    assert response.status_code == 200
    assert await db_session.scalar(select(func.count(Student.id))) == 0


async def _class_of_five(seed, db_session):
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    faculty = await seed.user("Asha Rao")
    for roll in range(1, 6):
        await seed.student(cl, roll)
    await db_session.commit()
    return cl, faculty


@pytest.mark.asyncio
async def test_create_batch_assigns_range_and_links_faculty(db_session: AsyncSession, seed) -> None:
    cl, faculty = await _class_of_five(seed, db_session)

    response = await batches_service.create_batch(
        db_session, _teacher(cl), BatchCreate(name="B1", roll_start=2, roll_end=4, faculty_id=faculty.id)
    )

    assert response.students_assigned == 3
    assert response.faculty_linked is True
    result = await db_session.execute(select(Student.roll_no).where(Student.batch_id == response.batch.id))
    assert sorted(result.scalars().all()) == [2, 3, 4]
    link = await db_session.scalar(select(SubjectAssignment).where(SubjectAssignment.batch_id == response.batch.id))
    assert link.faculty_id == faculty.id
    assert link.subject_id is None


@pytest.mark.asyncio
async def test_create_batch_tolerates_faculty_link_failure(db_session: AsyncSession, seed, monkeypatch) -> None:
    cl, faculty = await _class_of_five(seed, db_session)

    async def failing_link(db, batch):
        raise SQLAlchemyError("link failed")

    monkeypatch.setattr(batches_service, "_insert_faculty_link", failing_link)

    response = await batches_service.create_batch(
        db_session, _teacher(cl), BatchCreate(name="B1", roll_start=1, roll_end=2, faculty_id=faculty.id)
    )

    assert response.faculty_linked is False
    assert response.students_assigned == 2
    assert await db_session.scalar(select(func.count(Batch.id))) == 1


@pytest.mark.asyncio
async def test_create_batch_rolls_back_when_assignment_fails(db_session: AsyncSession, seed, monkeypatch) -> None:
    cl, faculty = await _class_of_five(seed, db_session)

    async def failing_assign(db, batch):
        raise SQLAlchemyError("update failed")

    monkeypatch.setattr(batches_service, "_assign_students", failing_assign)

    with pytest.raises(StoreError):
        await batches_service.create_batch(
            db_session, _teacher(cl), BatchCreate(name="B1", roll_start=1, roll_end=2, faculty_id=faculty.id)
        )

    assert await db_session.scalar(select(func.count(Batch.id))) == 0
    assert await db_session.scalar(select(func.count(Student.id)).where(Student.batch_id.is_not(None))) == 0


@pytest.mark.asyncio
async def test_batch_range_validation(client: AsyncClient, db_session: AsyncSession, seed, login) -> None:
    cl, faculty = await _class_of_five(seed, db_session)
    login(_teacher(cl))

    response = await client.post(
        "/api/v1/batches",
        json={"name": "B1", "roll_start": 5, "roll_end": 1, "faculty_id": str(faculty.id)},
    )

    assert response.status_code == 422
