from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from devcamper.api.common import apply_updates, get_or_404
from devcamper.core.deps import get_list_query, require_role
from devcamper.core.errors import ValidationFailed
from devcamper.db.session import get_db
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.review import Review
from devcamper.models.user import ROLE_ADMIN, ROLE_USER, User
from devcamper.schemas.query import ListQuery
from devcamper.schemas.review import ReviewCreate, ReviewUpdate
from devcamper.services.advanced_results import advanced_results
from devcamper.services.bootcamp_stats import refresh_average_rating
from devcamper.services.ownership import ensure_owner_or_admin
from devcamper.services.serializers import REVIEWS, review_out

router = APIRouter()
bootcamp_reviews_router = APIRouter()

user_or_admin = require_role(ROLE_USER, ROLE_ADMIN)


@router.get("")
def get_reviews(lq: ListQuery = Depends(get_list_query), db: Session = Depends(get_db)):
    return advanced_results(db, REVIEWS, lq)


@bootcamp_reviews_router.get("/{bootcamp_id}/reviews")
def get_bootcamp_reviews(bootcamp_id: str, db: Session = Depends(get_db)):
    bootcamp = get_or_404(db, Bootcamp, bootcamp_id, "Bootcamp")
    rows = db.query(Review).filter(Review.bootcamp_id == bootcamp.id).order_by(Review.created_at.desc()).all()
    return {"success": True, "count": len(rows), "data": [review_out(r) for r in rows]}


@router.get("/{id}")
def get_review(id: str, db: Session = Depends(get_db)):
    review = get_or_404(db, Review, id, "Review")
    return {"success": True, "data": review_out(review, populate=True)}


@bootcamp_reviews_router.post("/{bootcamp_id}/reviews", status_code=201)
def add_review(
    bootcamp_id: str,
    payload: ReviewCreate,
    user: User = Depends(user_or_admin),
    db: Session = Depends(get_db),
):
    bootcamp = get_or_404(db, Bootcamp, bootcamp_id, "Bootcamp")
    existing = db.query(Review).filter(Review.bootcamp_id == bootcamp.id, Review.user_id == user.id).first()
    if existing is not None:
        raise ValidationFailed(f"User {user.id} has already reviewed bootcamp {bootcamp.id}")
    review = Review(**payload.model_dump(), bootcamp_id=bootcamp.id, user_id=user.id)
    db.add(review)
    refresh_average_rating(db, bootcamp.id)
    db.commit(); db.refresh(review)
    return {"success": True, "data": review_out(review)}


@router.put("/{id}")
def update_review(
    id: str,
    payload: ReviewUpdate,
    user: User = Depends(user_or_admin),
    db: Session = Depends(get_db),
):
    review = get_or_404(db, Review, id, "Review")
    ensure_owner_or_admin(user, review.user_id, "Not authorized to update review")
    apply_updates(review, payload.model_dump(exclude_unset=True, exclude_none=True))
    db.add(review)
    refresh_average_rating(db, review.bootcamp_id)
    db.commit(); db.refresh(review)
    return {"success": True, "data": review_out(review)}


@router.delete("/{id}")
def delete_review(id: str, user: User = Depends(user_or_admin), db: Session = Depends(get_db)):
    review = get_or_404(db, Review, id, "Review")
    ensure_owner_or_admin(user, review.user_id, "Not authorized to delete review")
    bootcamp_id = review.bootcamp_id
    db.delete(review)
    refresh_average_rating(db, bootcamp_id)
    db.commit()
    return {"success": True, "data": {}}
