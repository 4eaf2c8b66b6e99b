from devcamper.models.bootcamp import Bootcamp
from devcamper.models.course import Course
from devcamper.models.review import Review
from devcamper.models.user import User
from devcamper.services.advanced_results import Resource


def _iso(value):
    return value.isoformat() if value else None


def _id(value):
    return str(value) if value else None


def user_out(r: User) -> dict:
    return {
        "id": str(r.id),
        "name": r.name,
        "email": r.email,
        "role": r.role,
        "createdAt": _iso(r.created_at),
    }


def bootcamp_summary(r: Bootcamp | None) -> dict | None:
    if r is None:
        return None
    return {"id": str(r.id), "name": r.name, "description": r.description}


def course_out(r: Course, populate: bool = False) -> dict:
    return {
        "id": str(r.id),
        "title": r.title,
        "description": r.description,
        "weeks": r.weeks,
        "tuition": r.tuition,
        "minimumSkill": r.minimum_skill,
        "scholarshipAvailable": bool(r.scholarship_available),
        "bootcamp": bootcamp_summary(r.bootcamp) if populate else _id(r.bootcamp_id),
        "user": _id(r.user_id),
        "createdAt": _iso(r.created_at),
    }


def review_out(r: Review, populate: bool = False) -> dict:
    return {
        "id": str(r.id),
        "title": r.title,
        "text": r.text,
        "rating": r.rating,
        "bootcamp": bootcamp_summary(r.bootcamp) if populate else _id(r.bootcamp_id),
        "user": _id(r.user_id),
        "createdAt": _iso(r.created_at),
    }


def location_out(r: Bootcamp) -> dict | None:
    if r.longitude is None or r.latitude is None:
        return None
    return {
        "type": "Point",
        "coordinates": [r.longitude, r.latitude],
        "formattedAddress": r.formatted_address,
        "street": r.street,
        "city": r.city,
        "state": r.state,
        "zipcode": r.zipcode,
        "country": r.country,
    }


def bootcamp_out(r: Bootcamp, populate: bool = False) -> dict:
    item = {
        "id": str(r.id),
        "name": r.name,
        "slug": r.slug,
        "description": r.description,
        "website": r.website,
        "phone": r.phone,
        "email": r.email,
        "location": location_out(r),
        "careers": list(r.careers or []),
        "averageRating": r.average_rating,
        "averageCost": r.average_cost,
        "photo": r.photo,
        "housing": bool(r.housing),
        "jobAssistance": bool(r.job_assistance),
        "jobGuarantee": bool(r.job_guarantee),
        "acceptGi": bool(r.accept_gi),
        "user": _id(r.user_id),
        "createdAt": _iso(r.created_at),
    }
    if populate:
        item["courses"] = [course_out(c) for c in r.courses]
    return item


USERS = Resource(
    model=User,
    fields={"id": "id", "name": "name", "email": "email", "role": "role", "createdAt": "created_at"},
    serialize=user_out,
)

BOOTCAMPS = Resource(
    model=Bootcamp,
    fields={
        "id": "id",
        "name": "name",
        "slug": "slug",
        "description": "description",
        "website": "website",
        "phone": "phone",
        "email": "email",
        "careers": "careers",
        "averageRating": "average_rating",
        "averageCost": "average_cost",
        "photo": "photo",
        "housing": "housing",
        "jobAssistance": "job_assistance",
        "jobGuarantee": "job_guarantee",
        "acceptGi": "accept_gi",
        "user": "user_id",
        "createdAt": "created_at",
        "location.formattedAddress": "formatted_address",
        "location.street": "street",
        "location.city": "city",
        "location.state": "state",
        "location.zipcode": "zipcode",
        "location.country": "country",
    },
    serialize=lambda r: bootcamp_out(r, populate=True),
    populate=("courses",),
)

COURSES = Resource(
    model=Course,
    fields={
        "id": "id",
        "title": "title",
        "description": "description",
        "weeks": "weeks",
        "tuition": "tuition",
        "minimumSkill": "minimum_skill",
        "scholarshipAvailable": "scholarship_available",
        "bootcamp": "bootcamp_id",
        "user": "user_id",
        "createdAt": "created_at",
    },
    serialize=lambda r: course_out(r, populate=True),
    populate=("bootcamp",),
)

REVIEWS = Resource(
    model=Review,
    fields={
        "id": "id",
        "title": "title",
        "text": "text",
        "rating": "rating",
        "bootcamp": "bootcamp_id",
        "user": "user_id",
        "createdAt": "created_at",
    },
    serialize=lambda r: review_out(r, populate=True),
    populate=("bootcamp",),
)
