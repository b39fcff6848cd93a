"""
Tests for upload naming and dashboard numbers.
"""

import re

import pytest

from clarity_api.services.dashboard import completion_rate, dashboard_stats
from clarity_api.services.uploads import file_extension, storage_name

from conftest import make_image, make_project


def test_storage_name_layout():
    filename, file_path = storage_name("proj-1", "Cat Photo.JPG", now_ms=1700000000000)
    assert re.fullmatch(r"1700000000000-[0-9a-f]{9}\.jpg", filename)
    assert file_path == f"proj-1/{filename}"


def test_storage_names_are_unique():
    names = {storage_name("p", "a.png", now_ms=1)[0] for _ in range(50)}
    assert len(names) == 50


@pytest.mark.parametrize("name, ext", [
    ("a.png", "png"),
    ("archive.tar.GZ", "gz"),
    ("noext", "noext"),
])
def test_file_extension(name, ext):
    assert file_extension(name) == ext


@pytest.mark.parametrize("total, completed, rate", [
    (0, 0, 0),
    (3, 1, 33),
    (3, 2, 67),
    (8, 1, 13),
    (4, 4, 100),
])
def test_completion_rate(total, completed, rate):
    assert completion_rate(total, completed) == rate


def test_dashboard_counts_only_visible_projects(db, world):
    make_image(db, world.p1, world.u1, status="completed")
    other = make_project(db, world.u2)
    make_image(db, other, world.u2)

    stats = dashboard_stats(db, world.principal(world.u1))
    assert stats["total_projects"] == 1
    assert stats["total_images"] == 2
    assert stats["completed_images"] == 1
    assert stats["completion_rate"] == 50
    assert [(p.id, n) for p, n in stats["recent_projects"]] == [(world.p1.id, 2)]
