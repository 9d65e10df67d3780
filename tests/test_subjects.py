from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.api.v1.subjects import service
from acadtrack.api.v1.subjects.service import merge_catalog_sources
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.enums import AssignmentSource
from acadtrack.core.models import FacultyAvailability, SubjectAssignment


def test_merge_catalog_sources_first_source_wins() -> None:
    class Row:
        def __init__(self, id):
            self.id = id

    a, b, c = Row(1), Row(2), Row(3)
    merged = merge_catalog_sources(
        [
            (AssignmentSource.DIRECT, [a]),
            (AssignmentSource.OFFERED, [b, a]),
            (AssignmentSource.SELF_SELECTED, [c, b]),
        ]
    )
    assert [(subject.id, source) for subject, source in merged.values()] == [
        (1, AssignmentSource.DIRECT),
        (2, AssignmentSource.OFFERED),
        (3, AssignmentSource.SELF_SELECTED),
    ]


@pytest.mark.asyncio
async def test_staff_catalog_unions_three_sources(db_session: AsyncSession, seed) -> None:
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    b1 = await seed.batch(cl, "B1", 1, 10)
    b2 = await seed.batch(cl, "B2", 11, 20)
    student = await seed.student(cl, 1, batch=b1)
    faculty = await seed.user("Asha Rao")

    theory = await seed.subject("Operating Systems", "CS201", cl=cl)
    await seed.assign(faculty, theory, cl=cl)
    lab = await seed.subject("OS Lab", "CS201L", "practical", cl=cl)
    await seed.assign(faculty, lab, cl=cl, batch=b2)

    offered = await seed.subject("Open Elective - Economics", "OE201", "theory", department=dept)
    await seed.offered(offered, dept, 2, [faculty.id])
    # also taught directly: the direct source wins
    await seed.offered(theory, dept, 2, [faculty.id], semester=3)

    selected = await seed.subject("Finance", "MDM201", "mdm", department=dept)
    await seed.selection(student, mdm_id=selected.id, mdm_faculty_id=faculty.id)

    catalog = await service.staff_catalog(db_session, faculty.id)

    assert [(s.id, s.source) for s in catalog.theory] == [(theory.id, AssignmentSource.DIRECT)]
    assert [(s.id, s.source) for s in catalog.practical] == [(lab.id, AssignmentSource.DIRECT)]
    assert [b.name for b in catalog.practical[0].batches] == ["B2"]
    assert [(s.id, s.source) for s in catalog.oe] == [(offered.id, AssignmentSource.OFFERED)]
    assert [(s.id, s.source) for s in catalog.mdm] == [(selected.id, AssignmentSource.SELF_SELECTED)]
    assert catalog.pe == []


@pytest.mark.asyncio
async def test_staff_catalog_is_empty_without_links(db_session: AsyncSession, seed) -> None:
    faculty = await seed.user("Asha Rao")

    catalog = await service.staff_catalog(db_session, faculty.id)

    assert catalog.theory == [] and catalog.practical == [] and catalog.mdm == []


@pytest.mark.asyncio
async def test_student_catalog(db_session: AsyncSession, seed) -> None:
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    b1 = await seed.batch(cl, "B1", 1, 10)
    b2 = await seed.batch(cl, "B2", 11, 20)
    student = await seed.student(cl, 12, batch=b2)
    asha = await seed.user("Asha Rao")
    vikram = await seed.user("Vikram Shah")

    theory = await seed.subject("Operating Systems", "CS201", cl=cl)
    await seed.assign(asha, theory, cl=cl)
    await seed.subject("Mathematics III", "MA201", cl=cl)
    other_batch_lab = await seed.subject("OS Lab", "CS201L", "practical", cl=cl)
    await seed.assign(asha, other_batch_lab, cl=cl, batch=b1)
    own_lab = await seed.subject("Networks Lab", "CS202L", "practical", cl=cl)
    await seed.assign(asha, own_lab, cl=cl, batch=b1)
    await seed.assign(vikram, own_lab, cl=cl, batch=b2)

    oe = await seed.subject("Psychology", "OE201", "oe", department=dept)
    pe = await seed.subject("Cloud Computing", "PE301", "pe", department=dept)
    await seed.selection(student, oe_id=oe.id, oe_faculty_id=vikram.id, pe_id=pe.id, pe_faculty_id=vikram.id)

    db_session.add(FacultyAvailability(faculty_id=asha.id, subject_id=theory.id, is_available=True))
    await db_session.flush()

    catalog = await service.student_catalog(db_session, student.id)

    theory_rows = {s.code: s for s in catalog.theory}
    assert set(theory_rows) == {"CS201", "MA201"}
    assert theory_rows["CS201"].faculty == "Asha Rao"
    assert theory_rows["CS201"].faculty_available is True
    assert theory_rows["MA201"].faculty == "Not assigned"
    assert theory_rows["MA201"].faculty_available is False

    assert [(s.code, s.faculty, s.batch_id) for s in catalog.practical] == [("CS202L", "Vikram Shah", b2.id)]
    assert [(s.code, s.faculty) for s in catalog.oe] == [("OE201", "Vikram Shah")]
    # PE is not visible in year 2
    assert catalog.pe == []


@pytest.mark.asyncio
async def test_subjects_for_other_roles_is_empty(db_session: AsyncSession) -> None:
    catalog = await service.subjects_for(db_session, ActorContext(id=uuid4(), role="director"))

    assert catalog.theory == [] and catalog.oe == []


@pytest.mark.asyncio
async def test_create_practical_subject_with_batches(
    client: AsyncClient, db_session: AsyncSession, seed, login
) -> None:
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    b1 = await seed.batch(cl, "B1", 1, 10)
    b2 = await seed.batch(cl, "B2", 11, 20)
    asha = await seed.user("Asha Rao")
    vikram = await seed.user("Vikram Shah")
    await db_session.commit()
    login(ActorContext(id=uuid4(), role="class_teacher", class_id=cl.id))

    payload = {
        "name": "DBMS Lab",
        "code": "cs203l",
        "type": "practical",
        "batches": [
            {"batch_id": str(b1.id), "faculty_id": str(asha.id)},
            {"batch_id": str(b2.id), "faculty_id": str(vikram.id)},
        ],
    }
    response = await client.post("/api/v1/subjects/class", json=payload)

    assert response.status_code == 201
    data = response.json()
    assert data["subject"]["code"] == "CS203L"
    assert data["assignments"] == 2

    result = await db_session.execute(
        select(SubjectAssignment.batch_id).where(SubjectAssignment.subject_id == UUID(data["subject"]["id"]))
    )
    assert set(result.scalars().all()) == {b1.id, b2.id}

    duplicate = await client.post("/api/v1/subjects/class", json=payload)
    assert duplicate.status_code == 409
    assert duplicate.json()["success"] is False


@pytest.mark.asyncio
async def test_availability_round_trip(client: AsyncClient, db_session: AsyncSession, seed, login) -> None:
    dept = await seed.department("CSE")
    cl = await seed.school_class(dept, year=2)
    await seed.subject("Operating Systems", "CS201", cl=cl)
    faculty = await seed.user("Asha Rao")
    await db_session.commit()
    login(ActorContext(id=faculty.id, role="faculty"))

    response = await client.put(
        "/api/v1/subjects/availability", json={"is_available": True, "subject_codes": ["cs201"]}
    )
    assert response.status_code == 200
    assert response.json()["subject_codes"] == ["CS201"]

    response = await client.put(
        "/api/v1/subjects/availability", json={"is_available": True, "subject_codes": ["NOPE"]}
    )
    assert response.status_code == 400

    response = await client.put("/api/v1/subjects/availability", json={"is_available": False})
    assert response.json() == {"success": True, "is_available": False, "subject_codes": []}
