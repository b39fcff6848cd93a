"""
Shared fixtures: an in-memory database per test and a small world of
profiles and project rows to authorize against.
"""

from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clarity_api.api.deps import get_db
from clarity_api.core.principals import resolve
from clarity_api.core.security import create_access_token
from clarity_api.db.base import Base
from clarity_api.db.session import build_engine
from clarity_api.main import app
from clarity_api.models import Annotation, Image, Label, Profile, Project, ProjectMember


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def make_profile(db, role="annotator", name=None, active=True):
    name = name or uuid4().hex[:8]
    profile = Profile(
        id=str(uuid4()),
        email=f"{name}@example.com",
        full_name=name,
        password_hash="not-a-real-hash",
        role=role,
        active=active,
    )
    db.add(profile)
    db.commit()
    return profile


def make_project(db, creator, name="Project"):
    project = Project(id=str(uuid4()), name=name, created_by=creator.id)
    db.add(project)
    db.commit()
    return project


def make_label(db, project, name="car", annotation_type="bounding_box"):
    label = Label(
        id=str(uuid4()), project_id=project.id, name=name, annotation_type=annotation_type
    )
    db.add(label)
    db.commit()
    return label


def make_image(db, project, uploader, status="pending"):
    image = Image(
        id=str(uuid4()),
        project_id=project.id,
        filename="1-abc.png",
        original_filename="street.png",
        file_path=f"{project.id}/1-abc.png",
        file_size=1024,
        width=640,
        height=480,
        status=status,
        uploaded_by=uploader.id,
    )
    db.add(image)
    db.commit()
    return image


def make_annotation(db, image, label, creator):
    annotation = Annotation(
        id=str(uuid4()),
        image_id=image.id,
        label_id=label.id,
        annotation_type=label.annotation_type,
        annotation_data={"x": 10, "y": 20, "width": 30, "height": 40},
        created_by=creator.id,
    )
    db.add(annotation)
    db.commit()
    return annotation


def enroll(db, project, profile, role="annotator"):
    member = ProjectMember(
        id=str(uuid4()), project_id=project.id, user_id=profile.id, role=role
    )
    db.add(member)
    db.commit()
    return member


@pytest.fixture
def world(db):
    """
    u1 owns p1 with label l1, image i1 and annotation a1.
    u2 is an unrelated annotator, u3 a reviewer, admin an admin.
    """
    u1 = make_profile(db, name="u1")
    u2 = make_profile(db, name="u2")
    u3 = make_profile(db, role="reviewer", name="u3")
    admin = make_profile(db, role="admin", name="admin")
    p1 = make_project(db, u1, name="Streets")
    l1 = make_label(db, p1)
    i1 = make_image(db, p1, u1)
    a1 = make_annotation(db, i1, l1, u1)
    return SimpleNamespace(
        u1=u1, u2=u2, u3=u3, admin=admin, p1=p1, l1=l1, i1=i1, a1=a1,
        principal=lambda profile: resolve(db, profile.id),
    )


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(profile):
    return {"Authorization": f"Bearer {create_access_token({'sub': profile.id})}"}
