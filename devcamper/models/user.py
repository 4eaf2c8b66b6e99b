from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from devcamper.db.session import Base
from devcamper.models.common import ResourceMixin

ROLE_USER = "user"
ROLE_PUBLISHER = "publisher"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_PUBLISHER, ROLE_ADMIN)

class User(Base, ResourceMixin):
    __tablename__ = "users"
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(String(20), default=ROLE_USER, nullable=False)  # user|publisher|admin
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    reset_password_token: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    reset_password_expire: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
