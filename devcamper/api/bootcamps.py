import logging
import re
from pathlib import PurePath

from fastapi import APIRouter, Depends, File, Path, UploadFile
from sqlalchemy.orm import Session

from devcamper.api.common import apply_updates, get_or_404
from devcamper.core.config import Settings
from devcamper.core.deps import get_file_storage, get_geocoder, get_list_query, get_settings, require_role
from devcamper.core.errors import InternalFailure, ValidationFailed
from devcamper.db.session import get_db
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.user import ROLE_ADMIN, ROLE_PUBLISHER, User
from devcamper.schemas.bootcamp import BootcampCreate, BootcampUpdate
from devcamper.schemas.query import ListQuery
from devcamper.services.advanced_results import advanced_results
from devcamper.services.file_storage import FileStorage, StorageError
from devcamper.services.geo_search import bootcamps_within, radius_in_radians
from devcamper.services.geocoder import GeocodingError, Geocoder, GeoLocation
from devcamper.services.ownership import ensure_owner_or_admin
from devcamper.services.serializers import BOOTCAMPS, bootcamp_out

router = APIRouter()
logger = logging.getLogger("devcamper.bootcamps")

publisher_or_admin = require_role(ROLE_PUBLISHER, ROLE_ADMIN)

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    candidate = _SLUG_PATTERN.sub("-", str(value or "").lower()).strip("-")
    return re.sub(r"-{2,}", "-", candidate)


def geocode_first(geocoder: Geocoder, query: str, what: str) -> GeoLocation:
    try:
        locations = geocoder.geocode(query)
    except GeocodingError as exc:
        logger.error("geocoding %r failed: %s", query, exc)
        raise InternalFailure("Geocoding service is unavailable")
    if not locations:
        raise ValidationFailed(f"Could not geocode {what} {query}")
    return locations[0]


def apply_location(bootcamp: Bootcamp, location: GeoLocation) -> None:
    bootcamp.latitude = location.latitude
    bootcamp.longitude = location.longitude
    bootcamp.formatted_address = location.formatted_address
    bootcamp.street = location.street
    bootcamp.city = location.city
    bootcamp.state = location.state
    bootcamp.zipcode = location.zipcode
    bootcamp.country = location.country


@router.get("")
def get_bootcamps(lq: ListQuery = Depends(get_list_query), db: Session = Depends(get_db)):
    return advanced_results(db, BOOTCAMPS, lq)


@router.get("/radius/{zipcode}/{distance}")
def get_bootcamps_in_radius(
    zipcode: str,
    distance: float = Path(ge=0),
    db: Session = Depends(get_db),
    geocoder: Geocoder = Depends(get_geocoder),
):
    loc = geocode_first(geocoder, zipcode, "zipcode")
    rows = bootcamps_within(db, latitude=loc.latitude, longitude=loc.longitude, radius=radius_in_radians(distance))
    return {"success": True, "count": len(rows), "data": [bootcamp_out(r) for r in rows]}


@router.get("/{id}")
def get_bootcamp(id: str, db: Session = Depends(get_db)):
    bootcamp = get_or_404(db, Bootcamp, id, "Bootcamp")
    return {"success": True, "data": bootcamp_out(bootcamp, populate=True)}


@router.post("", status_code=201)
def create_bootcamp(
    payload: BootcampCreate,
    user: User = Depends(publisher_or_admin),
    db: Session = Depends(get_db),
    geocoder: Geocoder = Depends(get_geocoder),
):
    # Publishers may own a single bootcamp; admins any number.
    published = db.query(Bootcamp).filter(Bootcamp.user_id == user.id).first()
    if published is not None and user.role != ROLE_ADMIN:
        raise ValidationFailed(f"The user with ID {user.id} has already published a bootcamp")

    location = geocode_first(geocoder, payload.address, "address")
    bootcamp = Bootcamp(**payload.model_dump(), slug=slugify(payload.name), user_id=user.id)
    apply_location(bootcamp, location)
    db.add(bootcamp); db.commit(); db.refresh(bootcamp)
    return {"success": True, "data": bootcamp_out(bootcamp)}


@router.put("/{id}")
def update_bootcamp(
    id: str,
    payload: BootcampUpdate,
    user: User = Depends(publisher_or_admin),
    db: Session = Depends(get_db),
    geocoder: Geocoder = Depends(get_geocoder),
):
    bootcamp = get_or_404(db, Bootcamp, id, "Bootcamp")
    ensure_owner_or_admin(user, bootcamp.user_id, f"User {user.id} is not authorized to update this bootcamp")

    values = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in values:
        values["slug"] = slugify(values["name"])
    new_address = values.get("address")
    if new_address is not None and new_address != bootcamp.address:
        apply_location(bootcamp, geocode_first(geocoder, new_address, "address"))
    apply_updates(bootcamp, values)
    db.add(bootcamp); db.commit(); db.refresh(bootcamp)
    return {"success": True, "data": bootcamp_out(bootcamp)}


@router.delete("/{id}")
def delete_bootcamp(id: str, user: User = Depends(publisher_or_admin), db: Session = Depends(get_db)):
    bootcamp = get_or_404(db, Bootcamp, id, "Bootcamp")
    ensure_owner_or_admin(user, bootcamp.user_id, f"User {user.id} is not authorized to delete this bootcamp")
    db.delete(bootcamp); db.commit()
    return {"success": True, "data": {}}


@router.put("/{id}/photo")
def bootcamp_photo_upload(
    id: str,
    file: UploadFile | None = File(default=None),
    user: User = Depends(publisher_or_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    storage: FileStorage = Depends(get_file_storage),
):
    bootcamp = get_or_404(db, Bootcamp, id, "Bootcamp")
    ensure_owner_or_admin(user, bootcamp.user_id, f"User {user.id} is not authorized to update this bootcamp")

    if file is None or not file.filename:
        raise ValidationFailed("Please upload a file")
    if not str(file.content_type or "").startswith("image"):
        raise ValidationFailed("Please upload an image file")

    content = file.file.read(settings.MAX_FILE_UPLOAD + 1)
    if len(content) > settings.MAX_FILE_UPLOAD:
        raise ValidationFailed(f"Please upload an image less than {settings.MAX_FILE_UPLOAD}")

    file_name = f"photo_{bootcamp.id}{PurePath(file.filename).suffix}"
    try:
        stored_name = storage.save(file_name, content, file.content_type)
    except StorageError as exc:
        logger.error("photo upload for bootcamp %s failed: %s", bootcamp.id, exc)
        raise InternalFailure("Problem with file upload")

    bootcamp.photo = stored_name
    db.add(bootcamp); db.commit()
    return {"success": True, "data": stored_name}
