"""Class, department and year rollups. Computed from current submissions on every request."""

from typing import Dict, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from acadtrack.api.v1.submissions import aggregation
from acadtrack.api.v1.submissions.service import load_statuses
from acadtrack.auth.schemas import ActorContext
from acadtrack.core.models import Department, SchoolClass, Student
from acadtrack.core.services import require_class_id

from .schemas import (
    ClassStatistics,
    ClassStatisticsResponse,
    DepartmentStatistics,
    DepartmentStatisticsResponse,
    YearStatistics,
    YearStatisticsResponse,
)

YEAR_NAMES = {1: "First Year", 2: "Second Year", 3: "Third Year", 4: "Fourth Year"}


async def _students_in(db: AsyncSession, class_ids: List[UUID]) -> List[Student]:
    if not class_ids:
        return []
    result = await db.execute(select(Student).where(Student.class_id.in_(class_ids)))
    return list(result.scalars().all())


async def class_statistics(db: AsyncSession, actor: ActorContext) -> ClassStatisticsResponse:
    class_id = require_class_id(actor)
    students = await _students_in(db, [class_id])
    total = len(students)
    defaulter_ids = {s.id for s in students if s.defaulter}
    grouped = await load_statuses(db, (s.id for s in students))

    overall = aggregation.active_students(grouped)
    marked = aggregation.rollup((s.id for s in students), grouped)
    defaulter_done = aggregation.students_with_completed(grouped, aggregation.DEFAULTER_WORK) & defaulter_ids

    return ClassStatisticsResponse(
        statistics=ClassStatistics(
            overall_submission=aggregation.percentage(len(overall), total),
            submission_marked=marked.percentage,
            defaulter_work_submitted=aggregation.percentage(len(defaulter_done), len(defaulter_ids)),
            total_students=total,
            defaulter_count=len(defaulter_ids),
        )
    )


async def department_statistics(db: AsyncSession) -> DepartmentStatisticsResponse:
    result = await db.execute(select(Department).order_by(Department.name))
    departments = result.scalars().all()

    stats: List[DepartmentStatistics] = []
    for dept in departments:
        result = await db.execute(select(SchoolClass.id).where(SchoolClass.department_id == dept.id))
        class_ids = list(result.scalars().all())
        students = await _students_in(db, class_ids)
        grouped = await load_statuses(db, (s.id for s in students))
        figures = aggregation.rollup((s.id for s in students), grouped)
        stats.append(
            DepartmentStatistics(
                id=dept.id,
                name=dept.name,
                submission_rate=figures.percentage,
                total_students=figures.total_students,
                completed_students=figures.completed_students,
                class_count=len(class_ids),
            )
        )
    return DepartmentStatisticsResponse(statistics=stats)


async def year_statistics(db: AsyncSession, department_id: UUID) -> YearStatisticsResponse:
    result = await db.execute(
        select(SchoolClass.id, SchoolClass.year)
        .where(SchoolClass.department_id == department_id)
        .order_by(SchoolClass.year)
    )
    by_year: Dict[int, List[UUID]] = {}
    for row in result.all():
        by_year.setdefault(row.year, []).append(row.id)

    stats: List[YearStatistics] = []
    for year in sorted(by_year):
        class_ids = by_year[year]
        students = await _students_in(db, class_ids)
        grouped = await load_statuses(db, (s.id for s in students))
        figures = aggregation.rollup((s.id for s in students), grouped)
        stats.append(
            YearStatistics(
                year=year,
                year_name=YEAR_NAMES.get(year, f"Year {year}"),
                percentage=figures.percentage,
                total_students=figures.total_students,
                completed_students=figures.completed_students,
                defaulter_count=sum(1 for s in students if s.defaulter),
                class_count=len(class_ids),
            )
        )
    return YearStatisticsResponse(statistics=stats)
