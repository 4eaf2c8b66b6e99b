import uuid

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from devcamper.db.session import Base
from devcamper.models.common import ResourceMixin

class Review(Base, ResourceMixin):
    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("bootcamp_id", "user_id", name="uq_reviews_bootcamp_user"),)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)  # 1..10
    bootcamp_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("bootcamps.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    bootcamp = relationship("Bootcamp", back_populates="reviews")
