"""Public catalog routes."""
from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from coursehub.api.deps import get_db
from coursehub.db.models import Course
from coursehub.db.repositories import CourseRepository

router = APIRouter(prefix="/api/courses", tags=["courses"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def format_money(value) -> str:
    return str(Decimal(str(value)).quantize(Decimal("0.01")))


def serialize_course(course: Course) -> dict:
    return {
        "id": course.id,
        "title": course.title,
        "description": course.description,
        "category": course.category,
        "price": format_money(course.price),
        "duration": course.duration,
        "rating": format_money(course.rating),
        "image": course.image,
        "file_url": course.file_url,
        "curriculum": course.curriculum,
        "created_at": course.created_at.isoformat() if course.created_at else None,
    }


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.get("", summary="List all courses")
def list_courses(db: Session = Depends(get_db)):
    return [serialize_course(c) for c in CourseRepository(db).list(limit=500)]


@router.get("/{course_id}", summary="Get a single course")
def get_course(course_id: str, db: Session = Depends(get_db)):
    course = CourseRepository(db).get(course_id)
    if course is None:
        raise HTTPException(status_code=404, detail="Course not found")
    return serialize_course(course)
