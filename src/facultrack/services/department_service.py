"""Department catalog lookups."""

from __future__ import annotations

import re
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.errors import NotFoundError
from ..models import Department

DEPARTMENT_NAMES = (
    "1st Year",
    "CSE 2nd Year",
    "CSE 3rd Year",
    "CSE 4th Year",
    "UIC, BCA 1st Year",
    "UIC, BCA 2nd Year",
    "UIC, BCA 3rd Year",
    "UIC, MCA 1st Year",
    "UIC, MCA 2nd Year",
    "AIT CSE AI/ML 2nd Year",
    "AIT CSE AI/ML 3rd Year",
    "AIT CSE AI/ML 4th Year",
    "AIT CSE NON AI/ML 2nd Year",
    "AIT CSE NON AI/ML 3rd Year",
    "AIT CSE NON AI/ML 4th Year",
    "NON-CSE 2nd Year",
    "NON-CSE 3rd Year",
    "NON-CSE 4th Year",
    "ME-NON-CSE 1st Year",
    "ME-NON-CSE 2nd Year",
    "ME CSE 1st Year",
    "ME CSE 2nd Year",
    "PhD CSE",
    "PhD NON-CSE",
)


def slugify(name: str) -> str:
    """Derive the stable department id from its display name."""

    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


DEPARTMENT_CATALOG = {slugify(name): name for name in DEPARTMENT_NAMES}


def seed_departments(session: Session) -> int:
    """Insert catalog entries that are missing; returns how many were added."""

    existing = set(session.execute(select(Department.department_id)).scalars().all())
    added = 0
    for department_id, name in DEPARTMENT_CATALOG.items():
        if department_id not in existing:
            session.add(Department(department_id=department_id, name=name))
            added += 1
    session.flush()
    return added


def list_departments(session: Session) -> Sequence[Department]:
    stmt = select(Department).order_by(Department.name.asc())
    return session.execute(stmt).scalars().all()


def ensure_department(session: Session, department_id: str) -> Department:
    department = session.get(Department, department_id)
    if department is None:
        raise NotFoundError(f"Department {department_id} not found", record_id=department_id)
    return department
