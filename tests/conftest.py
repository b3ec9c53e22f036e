# tests/conftest.py
import os
import tempfile
from datetime import datetime, timedelta, timezone

# Keep the import-time engine and log files away from the working tree
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("STORAGE_PATH", tempfile.mkdtemp(prefix="docportal-test-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from docportal.main import app
from docportal.database import Base, get_db
from docportal.models import Document as DocumentModel, DocumentStatus, Folder as FolderModel
from docportal.schemas.actor import Actor, Role
from docportal.schemas.document import Document
from docportal.schemas.folder import Folder

SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
BASE_TIME = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    """Fresh in-memory database per test"""
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool  # Needed for SQLite in-memory database
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def client(db_session):
    """Test client using the test database"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def dos():
    return Actor(id="dos-1", role=Role.DOS)


@pytest.fixture
def teacher():
    return Actor(id="teacher-1", role=Role.TEACHER)


@pytest.fixture
def dos_headers(dos):
    return {"X-Actor-Id": dos.id, "X-Actor-Role": dos.role.value}


@pytest.fixture
def teacher_headers(teacher):
    return {"X-Actor-Id": teacher.id, "X-Actor-Role": teacher.role.value}


@pytest.fixture
def make_folder():
    """Build Folder snapshots; created_at advances with an explicit offset"""
    def _make(id, name, parent_id=None, minutes=0, deleted=False):
        created = BASE_TIME + timedelta(minutes=minutes)
        return Folder(
            id=id,
            name=name,
            parent_id=parent_id,
            created_by="dos-1",
            created_at=created,
            updated_at=created,
            deleted_at=created + timedelta(hours=1) if deleted else None,
        )
    return _make


@pytest.fixture
def make_document():
    def _make(id, name="Document", status=DocumentStatus.APPROVED, minutes=0, **fields):
        created = BASE_TIME + timedelta(minutes=minutes)
        values = dict(
            id=id,
            name=name,
            file_size=2048,
            file_type="pdf",
            file_url=f"uploads/{id}.pdf",
            class_level="S6",
            subject="Physics",
            year="2024",
            tags=[],
            status=status,
            downloads=0,
            uploaded_by="teacher-1",
            created_at=created,
            updated_at=created,
        )
        if status != DocumentStatus.PENDING:
            values.update(approved_by="dos-1", approved_at=created + timedelta(hours=1))
        values.update(fields)
        return Document(**values)
    return _make


@pytest.fixture
def store(db_session):
    """Persist Folder / Document snapshots straight into the test database"""
    def _store(record):
        if isinstance(record, Folder):
            row = FolderModel(**record.model_dump())
        else:
            row = DocumentModel(**record.model_dump(exclude={"file_size_display"}))
        db_session.add(row)
        db_session.commit()
        return record
    return _store


@pytest.fixture
def sample_folder(store, make_folder):
    return store(make_folder("folder-physics", "Physics"))


@pytest.fixture
def pending_document(store, make_document, sample_folder):
    return store(make_document(
        "doc-pending", "Physics Paper 2", status=DocumentStatus.PENDING,
        folder_id=sample_folder.id, description="Mechanics and waves"
    ))


@pytest.fixture
def approved_document(store, make_document, sample_folder):
    return store(make_document(
        "doc-approved", "Physics Paper 1", minutes=5, folder_id=sample_folder.id,
        tags=["National Exam", "Important"]
    ))
