import math

from sqlalchemy import func
from sqlalchemy.orm import Session

from devcamper.models.bootcamp import Bootcamp
from devcamper.models.course import Course
from devcamper.models.review import Review


def refresh_average_cost(db: Session, bootcamp_id) -> None:
    """Mean tuition rounded up to the next multiple of ten; None without courses."""
    db.flush()
    avg = db.query(func.avg(Course.tuition)).filter(Course.bootcamp_id == bootcamp_id).scalar()
    bootcamp = db.get(Bootcamp, bootcamp_id)
    if bootcamp is None:
        return
    bootcamp.average_cost = float(math.ceil(float(avg) / 10) * 10) if avg is not None else None
    db.add(bootcamp)


def refresh_average_rating(db: Session, bootcamp_id) -> None:
    db.flush()
    avg = db.query(func.avg(Review.rating)).filter(Review.bootcamp_id == bootcamp_id).scalar()
    bootcamp = db.get(Bootcamp, bootcamp_id)
    if bootcamp is None:
        return
    bootcamp.average_rating = float(avg) if avg is not None else None
    db.add(bootcamp)
