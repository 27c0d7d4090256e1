"""Repository tests for trusted services."""

import pytest

from platform_adapter.exceptions import RepositoryError
from platform_adapter.repositories.trusted_service_repository import TrustedServiceRepository
from tests.fixtures.factories import TrustedServiceFactory


@pytest.fixture
def repository(db_session):
    return TrustedServiceRepository(db_session)


def test_find_by_api_key(repository):
    TrustedServiceFactory(api_key="erp-key", name="erp", allowed_actions=["api_request", "*"])

    service = repository.find_by_api_key("erp-key")

    assert service.name == "erp"
    assert service.allowed_actions == ["api_request", "*"]
    assert service.can_perform_action("anything")


def test_find_unknown(repository):
    assert repository.find_by_api_key("nope") is None


def test_create(repository):
    service = repository.create("new-key", "reporting", ["api_request"])

    assert service.id
    assert service.is_active is True
    assert repository.find_by_api_key("new-key").name == "reporting"


def test_duplicate_key(repository):
    repository.create("dup-key", "one", [])

    with pytest.raises(RepositoryError):
        repository.create("dup-key", "two", [])
