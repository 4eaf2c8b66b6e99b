from fastapi import APIRouter
from devcamper.api import auth, bootcamps, courses, reviews, users

router = APIRouter()
router.include_router(bootcamps.router, prefix="/bootcamps", tags=["Bootcamps"])
router.include_router(courses.bootcamp_courses_router, prefix="/bootcamps", tags=["Courses"])
router.include_router(reviews.bootcamp_reviews_router, prefix="/bootcamps", tags=["Reviews"])
router.include_router(courses.router, prefix="/courses", tags=["Courses"])
router.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])
router.include_router(auth.router, prefix="/auth", tags=["Auth"])
router.include_router(users.router, prefix="/users", tags=["Users"])
