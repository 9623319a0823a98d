import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker
from app.config import Settings, get_settings
from app.database import Base, build_engine, get_db
from app.main import app
from app.models import HeroImage, QRCode  # noqa: F401 - register tables
from app.services.storage import LocalObjectStorage, StorageError, get_storage

PNG_HEADER = b"\x89PNG\r\n\x1a\n"


def png_bytes(size: int = 1024) -> bytes:
    return PNG_HEADER + b"\x00" * (size - len(PNG_HEADER))


class RecordingStorage(LocalObjectStorage):
    """Local storage that records upload calls."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.uploads = []

    def upload(self, bucket, key, data, content_type, cache_control):
        self.uploads.append((bucket, key, content_type, cache_control))
        super().upload(bucket, key, data, content_type, cache_control)


class FailingStorage(RecordingStorage):
    """Every upload is rejected, like a missing bucket."""

    def upload(self, bucket, key, data, content_type, cache_control):
        self.uploads.append((bucket, key, content_type, cache_control))
        raise StorageError(f"Bucket not found: {bucket}")


class BrokenCommitSession(Session):
    """Session whose commit fails, like a rejected insert."""

    def commit(self):
        raise OperationalError("INSERT", {}, Exception("database unavailable"))


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://", public_base_url="http://testserver")


@pytest.fixture
def storage(tmp_path, settings) -> RecordingStorage:
    return RecordingStorage(tmp_path / "storage", settings.public_base_url)


def _install(session_factory, storage, settings) -> TestClient:
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_settings] = lambda: settings
    return TestClient(app)


@pytest.fixture
def client(session_factory, storage, settings):
    yield _install(session_factory, storage, settings)
    app.dependency_overrides.clear()


@pytest.fixture
def failing_storage(tmp_path, settings) -> FailingStorage:
    return FailingStorage(tmp_path / "storage", settings.public_base_url)


@pytest.fixture
def failing_storage_client(session_factory, failing_storage, settings):
    yield _install(session_factory, failing_storage, settings)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_db_client(engine, storage, settings):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine, class_=BrokenCommitSession)
    yield _install(factory, storage, settings)
    app.dependency_overrides.clear()


class RemoveFailingStorage(RecordingStorage):
    """Uploads work; removing an object is rejected."""

    def remove(self, bucket, key):
        raise StorageError(f"Access denied: {bucket}/{key}")


class PublicUrlFailingStorage(RecordingStorage):
    """Upload succeeds, then resolving the public URL blows up."""

    def get_public_url(self, bucket, key):
        raise RuntimeError("storage client misconfigured")


class RemoteStorage:
    """In-memory stand-in for a remote (non-local) backend such as S3."""

    def __init__(self, public_url: str = "https://cdn.test"):
        self.public_url = public_url
        self.objects = {}

    def upload(self, bucket, key, data, content_type, cache_control):
        self.objects[(bucket, key)] = data

    def get_public_url(self, bucket, key):
        return f"{self.public_url}/{bucket}/{key}"

    def remove(self, bucket, key):
        self.objects.pop((bucket, key), None)


class FirstCommitConflictSession(Session):
    """First commit hits the single-active index, like losing a race with a concurrent first upload."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.conflicts = 1

    def commit(self):
        if self.conflicts:
            self.conflicts -= 1
            raise IntegrityError(
                "INSERT INTO qr_codes", {}, Exception("UNIQUE constraint failed: qr_codes.is_active")
            )
        super().commit()


@pytest.fixture
def client_with_storage(session_factory, settings):
    """Factory: TestClient wired to the given storage backend."""

    def make(storage):
        return _install(session_factory, storage, settings)

    yield make
    app.dependency_overrides.clear()
