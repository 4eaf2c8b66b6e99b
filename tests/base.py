import os
import tempfile
import unittest
import uuid
from datetime import datetime, timezone

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, delete
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure settings can be initialized in test environments
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from devcamper.core.config import Settings
from devcamper.core.deps import get_file_storage, get_geocoder
from devcamper.core.security import hash_password, issue_access_token
from devcamper.db.session import Base, get_db
from devcamper.main import create_app
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.course import Course
from devcamper.models.review import Review
from devcamper.models.user import User
from devcamper.services.geocoder import GeoLocation

JWT_SECRET = "test-jwt-secret"

BOSTON = GeoLocation(latitude=42.3601, longitude=-71.0589, formatted_address="Boston, MA 02118, US", city="Boston", state="MA", zipcode="02118", country="US")
CAMBRIDGE = GeoLocation(latitude=42.3736, longitude=-71.1097, formatted_address="Cambridge, MA 02139, US", city="Cambridge", state="MA", zipcode="02139", country="US")
NEW_YORK = GeoLocation(latitude=40.7128, longitude=-74.0060, formatted_address="New York, NY 10001, US", city="New York", state="NY", zipcode="10001", country="US")


class FakeGeocoder:
    def __init__(self, locations: dict[str, GeoLocation] | None = None):
        self.locations = dict(locations or {})
        self.calls: list[str] = []

    def geocode(self, query: str) -> list[GeoLocation]:
        self.calls.append(query)
        loc = self.locations.get(query)
        return [loc] if loc else []


class RecordingStorage:
    def __init__(self):
        self.saved: dict[str, bytes] = {}

    def save(self, file_name: str, content: bytes, content_type: str | None = None) -> str:
        self.saved[file_name] = content
        return file_name


class ApiTestBase(unittest.TestCase):
    settings_overrides: dict = {}

    @classmethod
    def setUpClass(cls):
        cls.engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        cls.SessionLocal = sessionmaker(bind=cls.engine, autocommit=False, autoflush=False)
        Base.metadata.create_all(bind=cls.engine)

    @classmethod
    def tearDownClass(cls):
        Base.metadata.drop_all(bind=cls.engine)
        cls.engine.dispose()

    def setUp(self):
        with self.SessionLocal() as db:
            db.execute(delete(Review))
            db.execute(delete(Course))
            db.execute(delete(Bootcamp))
            db.execute(delete(User))
            db.commit()

        self._tmpdir = tempfile.TemporaryDirectory()
        values = {
            "DATABASE_URL": "sqlite+pysqlite:///:memory:",
            "REDIS_URL": "",
            "JWT_SECRET": JWT_SECRET,
            "RATE_LIMIT_MAX_REQUESTS": 10000,
            "FILE_UPLOAD_PATH": self._tmpdir.name,
            "MAX_FILE_UPLOAD": 1024,
            "EMAIL_PROVIDER": "dummy",
        }
        values.update(self.settings_overrides)
        self.settings = Settings(**values)
        self.app = create_app(self.settings)

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        self.geocoder = FakeGeocoder({"02118": BOSTON, "02139": CAMBRIDGE, "10001": NEW_YORK})
        self.storage = RecordingStorage()
        self.app.dependency_overrides[get_db] = override_get_db
        self.app.dependency_overrides[get_geocoder] = lambda: self.geocoder
        self.app.dependency_overrides[get_file_storage] = lambda: self.storage
        self.client = TestClient(self.app)

    def tearDown(self):
        self.client.close()
        self.app.dependency_overrides.clear()
        self._tmpdir.cleanup()

    # helpers

    def create_user(self, role: str = "user", email: str | None = None, password: str = "secret123", name: str = "Test User") -> str:
        with self.SessionLocal() as db:
            user = User(
                name=name,
                email=email or f"{role}-{os.urandom(4).hex()}@example.com",
                role=role,
                password_hash=hash_password(password),
            )
            db.add(user)
            db.commit()
            return str(user.id)

    def token_for(self, user_id: str, role: str = "user") -> str:
        return issue_access_token(user_id, role, JWT_SECRET, expire_days=1)

    def auth(self, user_id: str, role: str = "user") -> dict:
        return {"Authorization": f"Bearer {self.token_for(user_id, role)}"}

    def create_bootcamp(
        self,
        owner_id: str,
        name: str,
        *,
        location: GeoLocation = BOSTON,
        careers: list[str] | None = None,
        average_cost: float | None = None,
        housing: bool = False,
        created_at: datetime | None = None,
    ) -> str:
        with self.SessionLocal() as db:
            row = Bootcamp(
                name=name,
                slug=name.lower().replace(" ", "-"),
                description=f"{name} description",
                address=location.formatted_address,
                latitude=location.latitude,
                longitude=location.longitude,
                formatted_address=location.formatted_address,
                city=location.city,
                state=location.state,
                zipcode=location.zipcode,
                country=location.country,
                careers=careers or ["Web Development"],
                average_cost=average_cost,
                housing=housing,
                user_id=uuid.UUID(owner_id),
                created_at=created_at or datetime.now(timezone.utc),
            )
            db.add(row)
            db.commit()
            return str(row.id)
