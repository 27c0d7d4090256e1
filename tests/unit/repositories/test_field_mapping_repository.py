"""Repository tests against the SQLite test database."""

import pytest

from platform_adapter.exceptions import RepositoryError
from platform_adapter.repositories.field_mapping_repository import FieldMappingRepository
from tests.fixtures.factories import FieldMappingFactory


@pytest.fixture
def repository(db_session):
    return FieldMappingRepository(db_session)


class TestFindActive:
    def test_returns_active_rules_for_key(self, repository):
        FieldMappingFactory(platform_id="shopee", entity_type="product", source_field="title")
        FieldMappingFactory(
            platform_id="shopee", entity_type="product", source_field="sku", is_active=False
        )
        FieldMappingFactory(platform_id="shopee", entity_type="order", source_field="total")
        FieldMappingFactory(platform_id="lazada", entity_type="product", source_field="title")

        rules = repository.find_active("shopee", "product")

        assert [r.source_field for r in rules] == ["title"]
        assert rules[0].platform_id == "shopee"

    def test_empty(self, repository):
        assert repository.find_active("shopee", "product") == []


class TestUpsert:
    def test_insert(self, repository):
        rule = repository.upsert("shopee", "product", "title", "name", "uppercase", True)

        assert rule.id
        assert rule.transform == "uppercase"
        assert rule.created_at is not None

    def test_update_clears_transform(self, repository):
        first = repository.upsert("shopee", "product", "title", "name", "uppercase", True)
        second = repository.upsert("shopee", "product", "title", "label", None, False)

        assert second.id == first.id
        assert second.target_field == "label"
        assert second.transform is None
        assert second.is_active is False
        assert len(repository.list()) == 1

    def test_same_source_on_other_platform_is_separate(self, repository):
        repository.upsert("shopee", "product", "title", "name", None, True)
        repository.upsert("lazada", "product", "title", "name", None, True)

        assert len(repository.list(entity_type="product")) == 2


class TestDelete:
    def test_delete_by_id(self, repository):
        rule = repository.upsert("shopee", "product", "title", "name", None, True)

        assert repository.delete_by_id(rule.id) is True
        assert repository.list() == []

    def test_delete_unknown(self, repository):
        assert repository.delete_by_id("missing") is False

