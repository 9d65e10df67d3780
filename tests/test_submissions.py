import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.api.v1.submissions import service
from acadtrack.api.v1.submissions.aggregation import CIE, COMPLETED, DEFAULTER_WORK, PENDING, TA
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.models import Submission


async def _taught_class(seed):
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    faculty = await seed.user("Asha Rao")
    subject = await seed.subject("Operating Systems", "CS201", cl=cl)
    await seed.assign(faculty, subject, cl=cl)
    types = await seed.submission_types()
    return dept, cl, faculty, subject, types


@pytest.mark.asyncio
async def test_mark_submission_upserts(client: AsyncClient, db_session: AsyncSession, seed, login) -> None:
    dept, cl, faculty, subject, types = await _taught_class(seed)
    student = await seed.student(cl, 1)
    await db_session.commit()
    login(ActorContext(id=faculty.id, role="faculty"))

    payload = {
        "student_id": str(student.id),
        "subject_id": str(subject.id),
        "submission_type": "TA",
        "status": "pending",
    }
    first = await client.post("/api/v1/submissions/mark", json=payload)
    assert first.status_code == 200
    assert first.json()["created"] is True

    second = await client.post("/api/v1/submissions/mark", json={**payload, "status": "COMPLETED"})
    assert second.status_code == 200
    assert second.json()["created"] is False
    assert second.json()["status"] == "completed"

    result = await db_session.execute(select(Submission).where(Submission.student_id == student.id))
    rows = result.scalars().all()
    assert len(rows) == 1
    assert rows[0].status == "completed"
    assert rows[0].marked_by == faculty.id


@pytest.mark.asyncio
async def test_mark_submission_rejections(client: AsyncClient, db_session: AsyncSession, seed, login) -> None:
    dept, cl, faculty, subject, types = await _taught_class(seed)
    student = await seed.student(cl, 1)
    stranger = await seed.user("Vikram Shah")
    await db_session.commit()
    payload = {
        "student_id": str(student.id),
        "subject_id": str(subject.id),
        "submission_type": "TA",
        "status": "completed",
    }

    login(ActorContext(id=stranger.id, role="faculty"))
    response = await client.post("/api/v1/submissions/mark", json=payload)
    assert response.status_code == 403
    assert response.json()["error"] == "You are not authorized to mark submissions for this subject."

    login(ActorContext(id=faculty.id, role="faculty"))
    response = await client.post("/api/v1/submissions/mark", json={**payload, "status": "done"})
    assert response.status_code == 400

    response = await client.post("/api/v1/submissions/mark", json={**payload, "submission_type": "Quiz"})
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid submission_type: Quiz."}


@pytest.mark.asyncio
async def test_subject_roster_lists_statuses(db_session: AsyncSession, seed) -> None:
    dept, cl, faculty, subject, types = await _taught_class(seed)
    s1 = await seed.student(cl, 1)
    s2 = await seed.student(cl, 2)
    await seed.submission(s1, subject, types[TA], COMPLETED)
    await seed.submission(s1, subject, types[CIE], PENDING)

    roster = await service.subject_roster(db_session, faculty.id, subject.id)

    assert [s.id for s in roster.students] == [s1.id, s2.id]
    assert roster.students[0].submissions == {TA: COMPLETED, CIE: PENDING}
    assert roster.students[1].submissions == {}
    assert sorted(roster.submission_types) == sorted([TA, CIE, DEFAULTER_WORK])


@pytest.mark.asyncio
async def test_class_students_percentage(db_session: AsyncSession, seed) -> None:
    dept, cl, faculty, subject, types = await _taught_class(seed)
    lab = await seed.subject("OS Lab", "CS201L", "practical", cl=cl)
    s1 = await seed.student(cl, 1)
    s2 = await seed.student(cl, 2)
    await seed.submission(s1, subject, types[TA], COMPLETED)
    await seed.submission(s1, subject, types[CIE], COMPLETED)
    await seed.submission(s1, lab, types[TA], COMPLETED)
    await seed.submission(s2, subject, types[TA], COMPLETED)

    response = await service.class_students(db_session, ActorContext(id=faculty.id, role="class_teacher", class_id=cl.id))

    by_roll = {s.roll_no: s.submission_percentage for s in response.students}
    assert by_roll == {1: 100, 2: 0}


@pytest.mark.asyncio
async def test_student_dashboard(client: AsyncClient, db_session: AsyncSession, seed, login) -> None:
    dept, cl, faculty, subject, types = await _taught_class(seed)
    other = await seed.subject("Mathematics III", "MA201", cl=cl)
    student = await seed.student(cl, 1, defaulter=True)
    await seed.submission(student, subject, types[TA], COMPLETED)
    await seed.submission(student, subject, types[CIE], COMPLETED)
    await seed.submission(student, subject, types[DEFAULTER_WORK], COMPLETED)
    await db_session.commit()
    login(ActorContext(id=student.id, role="student", class_id=cl.id))

    response = await client.get("/api/v1/submissions/dashboard")

    assert response.status_code == 200
    data = response.json()
    # 3 of 6 slots
    assert data["student"]["submission_percentage"] == 50
    subjects = {s["code"]: s for s in data["subjects"]}
    assert subjects["CS201"]["submissions"] == {"ta": "completed", "cie": "completed", "defaulter": "completed"}
    assert subjects["CS201"]["faculty"] == "Asha Rao"
    assert subjects[other.code]["submissions"] == {"ta": "pending", "cie": "pending", "defaulter": "pending"}
    assert subjects[other.code]["faculty"] == "Not assigned"


@pytest.mark.asyncio
async def test_subject_statistics(db_session: AsyncSession, seed) -> None:
    dept, cl, faculty, subject, types = await _taught_class(seed)
    s1 = await seed.student(cl, 1, defaulter=True)
    s2 = await seed.student(cl, 2)
    await seed.student(cl, 3)
    await seed.submission(s1, subject, types[TA], COMPLETED)
    await seed.submission(s2, subject, types[TA], PENDING)

    response = await service.subject_statistics(db_session, faculty.id)

    assert len(response.subjects) == 1
    stats = response.subjects[0]
    assert stats.total_students == 3
    assert stats.defaulter_count == 1
    assert stats.submission_stats[TA].model_dump() == {"total": 3, "completed": 1, "pending": 1, "not_started": 1}
    assert stats.submission_stats[CIE].not_started == 3
