import io
import os
import tempfile
from types import SimpleNamespace

import pytest

# Settings are read at import time; point them at a throwaway database first
_TMP_DIR = tempfile.mkdtemp(prefix="hvacdesk-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENABLE_OUTBOUND_LOGGING"] = "false"

from fastapi.testclient import TestClient  # noqa: E402
from PIL import Image  # noqa: E402

from hvacdesk.api.dependencies.storage import get_file_storage  # noqa: E402
from hvacdesk.core.security import create_access_token  # noqa: E402
from hvacdesk.db.base import Base  # noqa: E402
from hvacdesk.db.models.user import User  # noqa: E402
from hvacdesk.db.session import SessionLocal, engine  # noqa: E402
from hvacdesk.repositories.invoice import InvoiceRepository  # noqa: E402
from hvacdesk.repositories.job import JobRepository  # noqa: E402
from hvacdesk.repositories.report import ReportPhotoRepository, ReportRepository  # noqa: E402
from hvacdesk.repositories.user import UserRepository  # noqa: E402
from hvacdesk.schemas.actor import ActorContext, Role  # noqa: E402
from hvacdesk.services.file_services import FileService, LocalFileStorage  # noqa: E402
from hvacdesk.services.invoice_services import InvoiceService  # noqa: E402
from hvacdesk.services.job_services import JobService  # noqa: E402
from hvacdesk.services.numbering_services import NumberingService  # noqa: E402
from hvacdesk.services.report_services import ReportService  # noqa: E402


@pytest.fixture(autouse=True)
def reset_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def users(db):
    """One admin, two clients and two technicians."""
    rows = {
        "admin": User(email="admin@example.com", name="Admin", role=Role.ADMIN.value, hashed_password="x"),
        "client": User(email="client@example.com", name="Client", role=Role.CLIENT.value, hashed_password="x"),
        "other_client": User(email="other@example.com", name="Other Client", role=Role.CLIENT.value, hashed_password="x"),
        "tech": User(email="tech@example.com", name="Tech", role=Role.TECHNICIAN.value, hashed_password="x"),
        "other_tech": User(email="tech2@example.com", name="Tech Two", role=Role.TECHNICIAN.value, hashed_password="x"),
    }
    db.add_all(rows.values())
    db.commit()
    return SimpleNamespace(**{name: user.id for name, user in rows.items()})


@pytest.fixture
def actors(users):
    return SimpleNamespace(
        admin=ActorContext(id=users.admin, role=Role.ADMIN),
        client=ActorContext(id=users.client, role=Role.CLIENT),
        other_client=ActorContext(id=users.other_client, role=Role.CLIENT),
        tech=ActorContext(id=users.tech, role=Role.TECHNICIAN),
        other_tech=ActorContext(id=users.other_tech, role=Role.TECHNICIAN),
    )


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(str(tmp_path / "uploads"))


@pytest.fixture
def file_service(storage):
    return FileService(storage=storage, max_photos=6, max_size_mb=10, public_base_url="/uploads")


@pytest.fixture
def numbering():
    return NumberingService(job_prefix="ZL", invoice_prefix="FV")


@pytest.fixture
def job_service(db, numbering, file_service):
    return JobService(
        job_repo=JobRepository(db),
        user_repo=UserRepository(db),
        photo_repo=ReportPhotoRepository(db),
        numbering=numbering,
        file_service=file_service,
    )


@pytest.fixture
def invoice_service(db, numbering):
    return InvoiceService(
        invoice_repo=InvoiceRepository(db),
        job_repo=JobRepository(db),
        user_repo=UserRepository(db),
        numbering=numbering,
    )


@pytest.fixture
def report_service(db, file_service):
    return ReportService(
        report_repo=ReportRepository(db),
        photo_repo=ReportPhotoRepository(db),
        job_repo=JobRepository(db),
        file_service=file_service,
    )


def make_png(size=(4, 4), color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def client(storage):
    from main import app

    app.dependency_overrides[get_file_storage] = lambda: storage
    test_client = TestClient(app)
    try:
        yield test_client
    finally:
        test_client.close()
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(actors):
    """Bearer headers per actor name, e.g. ``auth_headers("tech")``."""
    def _headers(name):
        actor = getattr(actors, name)
        token = create_access_token({"sub": actor.id, "role": actor.role.value})
        return {"Authorization": f"Bearer {token}"}
    return _headers
