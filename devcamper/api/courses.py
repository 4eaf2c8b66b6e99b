from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from devcamper.api.common import apply_updates, get_or_404
from devcamper.core.deps import get_list_query, require_role
from devcamper.db.session import get_db
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.course import Course
from devcamper.models.user import ROLE_ADMIN, ROLE_PUBLISHER, User
from devcamper.schemas.course import CourseCreate, CourseUpdate
from devcamper.schemas.query import ListQuery
from devcamper.services.advanced_results import advanced_results
from devcamper.services.bootcamp_stats import refresh_average_cost
from devcamper.services.ownership import ensure_owner_or_admin
from devcamper.services.serializers import COURSES, course_out

router = APIRouter()
bootcamp_courses_router = APIRouter()

publisher_or_admin = require_role(ROLE_PUBLISHER, ROLE_ADMIN)


@router.get("")
def get_courses(lq: ListQuery = Depends(get_list_query), db: Session = Depends(get_db)):
    return advanced_results(db, COURSES, lq)


@bootcamp_courses_router.get("/{bootcamp_id}/courses")
def get_bootcamp_courses(bootcamp_id: str, db: Session = Depends(get_db)):
    bootcamp = get_or_404(db, Bootcamp, bootcamp_id, "Bootcamp")
    rows = db.query(Course).filter(Course.bootcamp_id == bootcamp.id).order_by(Course.created_at.asc()).all()
    return {"success": True, "count": len(rows), "data": [course_out(r) for r in rows]}


@router.get("/{id}")
def get_course(id: str, db: Session = Depends(get_db)):
    course = get_or_404(db, Course, id, "Course")
    return {"success": True, "data": course_out(course, populate=True)}


@bootcamp_courses_router.post("/{bootcamp_id}/courses", status_code=201)
def add_course(
    bootcamp_id: str,
    payload: CourseCreate,
    user: User = Depends(publisher_or_admin),
    db: Session = Depends(get_db),
):
    bootcamp = get_or_404(db, Bootcamp, bootcamp_id, "Bootcamp")
    ensure_owner_or_admin(user, bootcamp.user_id, f"User {user.id} is not authorized to add a course to bootcamp {bootcamp.id}")
    course = Course(**payload.model_dump(), bootcamp_id=bootcamp.id, user_id=user.id)
    db.add(course)
    refresh_average_cost(db, bootcamp.id)
    db.commit(); db.refresh(course)
    return {"success": True, "data": course_out(course)}


@router.put("/{id}")
def update_course(
    id: str,
    payload: CourseUpdate,
    user: User = Depends(publisher_or_admin),
    db: Session = Depends(get_db),
):
    course = get_or_404(db, Course, id, "Course")
    ensure_owner_or_admin(user, course.user_id, f"User {user.id} is not authorized to update course {course.id}")
    apply_updates(course, payload.model_dump(exclude_unset=True, exclude_none=True))
    db.add(course)
    refresh_average_cost(db, course.bootcamp_id)
    db.commit(); db.refresh(course)
    return {"success": True, "data": course_out(course)}


@router.delete("/{id}")
def delete_course(id: str, user: User = Depends(publisher_or_admin), db: Session = Depends(get_db)):
    course = get_or_404(db, Course, id, "Course")
    ensure_owner_or_admin(user, course.user_id, f"User {user.id} is not authorized to delete course {course.id}")
    bootcamp_id = course.bootcamp_id
    db.delete(course)
    refresh_average_cost(db, bootcamp_id)
    db.commit()
    return {"success": True, "data": {}}
