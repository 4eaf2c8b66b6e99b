import uuid

from sqlalchemy import JSON, Boolean, Float, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from devcamper.db.session import Base
from devcamper.models.common import ResourceMixin

CAREERS = (
    "Web Development",
    "Mobile Development",
    "UI/UX",
    "Data Science",
    "Business",
    "Other",
)

class Bootcamp(Base, ResourceMixin):
    __tablename__ = "bootcamps"
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    website: Mapped[str | None] = mapped_column(String(300), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    address: Mapped[str | None] = mapped_column(String(400), nullable=True)

    # GeoJSON point flattened into columns
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True, index=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True, index=True)
    formatted_address: Mapped[str | None] = mapped_column(String(400), nullable=True)
    street: Mapped[str | None] = mapped_column(String(200), nullable=True)
    city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    state: Mapped[str | None] = mapped_column(String(60), nullable=True)
    zipcode: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str | None] = mapped_column(String(60), nullable=True)

    careers: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    average_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    average_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    photo: Mapped[str] = mapped_column(String(200), default="no-photo.jpg", nullable=False)
    housing: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    job_assistance: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    job_guarantee: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    accept_gi: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    courses = relationship("Course", back_populates="bootcamp", cascade="all, delete-orphan", order_by="Course.created_at")
    reviews = relationship("Review", back_populates="bootcamp", cascade="all, delete-orphan")
