"""Shared fixtures: a temporary store with one organization and a fake mailer."""

from pathlib import Path

import pytest

from factories import RecordingSender
from mentor_match.core.models import Organization
from mentor_match.core.storage import JSONStorage


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def storage(tmp_path: Path) -> JSONStorage:
    return JSONStorage(tmp_path / "data.json")


@pytest.fixture
def org(storage: JSONStorage) -> Organization:
    return storage.add_organization(Organization(name="Acme Accelerator"))
