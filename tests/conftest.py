import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from typing import AsyncGenerator, Iterable, Optional
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from acadtrack.auth.dependencies import get_current_user
from acadtrack.auth.models import User
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.models import (
    Batch,
    Department,
    OfferedSubject,
    OfferedSubjectFaculty,
    SchoolClass,
    Student,
    StudentSelection,
    Subject,
    SubjectAssignment,
    Submission,
)
from acadtrack.core.services import ensure_submission_types
from acadtrack.db.session import Base, get_db
from acadtrack.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test, with the FastAPI dependency overridden."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def login():
    """Make every request run as the given actor."""

    def _login(actor: ActorContext) -> ActorContext:
        app.dependency_overrides[get_current_user] = lambda: actor
        return actor

    return _login


class Seed:
    """Small builders for rows the tests need. Each one flushes so ids are populated."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _add(self, obj):
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def department(self, name: str = "CSE") -> Department:
        return await self._add(Department(name=name))

    async def user(self, name: str, role: str = "faculty", department_id: Optional[UUID] = None) -> User:
        email = f"{name.lower().replace(' ', '.')}@college.test"
        return await self._add(User(name=name, email=email, role=role, department_id=department_id))

    async def school_class(
        self,
        department: Department,
        year: int = 2,
        name: str = "A",
        teacher: Optional[User] = None,
    ) -> SchoolClass:
        return await self._add(
            SchoolClass(
                department_id=department.id,
                year=year,
                name=name,
                class_teacher_id=teacher.id if teacher else None,
            )
        )

    async def batch(self, cl: SchoolClass, name: str, roll_start: int, roll_end: int, faculty: Optional[User] = None) -> Batch:
        return await self._add(
            Batch(
                class_id=cl.id,
                name=name,
                roll_start=roll_start,
                roll_end=roll_end,
                faculty_id=faculty.id if faculty else None,
            )
        )

    async def student(
        self,
        cl: SchoolClass,
        roll_no: int,
        name: Optional[str] = None,
        batch: Optional[Batch] = None,
        defaulter: bool = False,
    ) -> Student:
        return await self._add(
            Student(
                class_id=cl.id,
                batch_id=batch.id if batch else None,
                roll_no=roll_no,
                name=name or f"Student {roll_no}",
                hall_ticket_number=f"HT{cl.name}{cl.year}{roll_no:03d}",
                attendance_percent=60.0 if defaulter else 90.0,
                defaulter=defaulter,
            )
        )

    async def subject(
        self,
        name: str,
        code: str,
        type: str = "theory",
        cl: Optional[SchoolClass] = None,
        department: Optional[Department] = None,
    ) -> Subject:
        return await self._add(
            Subject(
                name=name,
                code=code,
                type=type,
                class_id=cl.id if cl else None,
                department_id=department.id if department else (cl.department_id if cl else None),
            )
        )

    async def assign(
        self,
        faculty: User,
        subject: Optional[Subject],
        cl: Optional[SchoolClass] = None,
        batch: Optional[Batch] = None,
    ) -> SubjectAssignment:
        return await self._add(
            SubjectAssignment(
                faculty_id=faculty.id,
                subject_id=subject.id if subject else None,
                class_id=cl.id if cl else None,
                batch_id=batch.id if batch else None,
            )
        )

    async def offered(
        self,
        subject: Subject,
        department: Department,
        year: int,
        faculty_ids: Iterable[UUID],
        semester: Optional[int] = None,
        is_active: bool = True,
    ) -> OfferedSubject:
        return await self._add(
            OfferedSubject(
                subject_id=subject.id,
                department_id=department.id,
                year=year,
                semester=semester,
                is_active=is_active,
                faculty_links=[
                    OfferedSubjectFaculty(faculty_id=fid, position=i) for i, fid in enumerate(faculty_ids)
                ],
            )
        )

    async def selection(self, student: Student, locked: bool = False, **pairs) -> StudentSelection:
        return await self._add(StudentSelection(student_id=student.id, selections_locked=locked, **pairs))

    async def submission_types(self):
        return await ensure_submission_types(self.db)

    async def submission(self, student: Student, subject: Subject, type_id: UUID, status: str) -> Submission:
        return await self._add(
            Submission(student_id=student.id, subject_id=subject.id, submission_type_id=type_id, status=status)
        )


@pytest.fixture()
def seed(db_session: AsyncSession) -> Seed:
    return Seed(db_session)
