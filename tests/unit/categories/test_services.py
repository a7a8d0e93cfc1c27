"""Unit tests for CategoryService and tree assembly."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from backoffice.core.errors import NotFoundError, ValidationError
from backoffice.modules.categories.models import Category
from backoffice.modules.categories.schemas import CategoryCreate, CategoryUpdate
from backoffice.modules.categories.services import CategoryService, build_tree


pytestmark = pytest.mark.unit


def _category(name: str, parent: Category | None = None, **overrides) -> Category:
    fields = {
        "id": uuid4(),
        "name": name,
        "slug": name.lower().replace(" ", "-"),
        "parent_id": parent.id if parent else None,
        "level": parent.level + 1 if parent else 0,
        "is_active": True,
        "position": 0,
    }
    fields.update(overrides)
    return Category(**fields)


@pytest.fixture
def store() -> dict:
    return {}


@pytest.fixture
def repo(store) -> AsyncMock:
    """Repository mock backed by an in-memory id -> category mapping."""
    repo = AsyncMock()
    repo.get_by_id.side_effect = store.get
    repo.slug_taken.return_value = False
    repo.create.side_effect = lambda category: category
    repo.update.side_effect = lambda category: category
    repo.list_children.side_effect = lambda category_id: [
        c for c in store.values() if c.parent_id == category_id
    ]
    repo.count_children.return_value = 0
    repo.count_products.return_value = 0
    return repo


@pytest.fixture
def tree(store) -> dict[str, Category]:
    """kitchen > mugs > travel mugs, plus a separate garden root."""
    kitchen = _category("Kitchen")
    mugs = _category("Mugs", kitchen)
    travel = _category("Travel Mugs", mugs)
    garden = _category("Garden")
    nodes = {"kitchen": kitchen, "mugs": mugs, "travel": travel, "garden": garden}
    store.update({c.id: c for c in nodes.values()})
    return nodes


class TestBuildTree:
    def test_nests_children(self, tree):
        ordered = [tree["kitchen"], tree["garden"], tree["mugs"], tree["travel"]]

        roots = build_tree(ordered)

        assert [r.name for r in roots] == ["Kitchen", "Garden"]
        [mugs] = roots[0].children
        assert mugs.name == "Mugs"
        assert [c.name for c in mugs.children] == ["Travel Mugs"]

    def test_missing_parent_drops_subtree(self, tree):
        roots = build_tree([tree["kitchen"], tree["travel"]])

        assert [r.name for r in roots] == ["Kitchen"]
        assert roots[0].children == []


class TestCreateCategory:
    async def test_slug_from_name(self, repo):
        category = await CategoryService(repo).create_category(
            CategoryCreate(name="Tea & Coffee")
        )

        assert category.slug == "tea-coffee"
        assert category.level == 0
        repo.slug_taken.assert_awaited_once_with("tea-coffee")

    async def test_child_level(self, repo, tree):
        category = await CategoryService(repo).create_category(
            CategoryCreate(name="Espresso Cups", parent_id=tree["mugs"].id)
        )

        assert category.level == 2
        assert category.parent_id == tree["mugs"].id

    async def test_unknown_parent(self, repo):
        with pytest.raises(ValidationError) as exc_info:
            await CategoryService(repo).create_category(
                CategoryCreate(name="Orphans", parent_id=uuid4())
            )

        assert exc_info.value.error_code == "parent_not_found"
        repo.create.assert_not_awaited()

    async def test_slug_taken(self, repo):
        repo.slug_taken.return_value = True

        with pytest.raises(ValidationError) as exc_info:
            await CategoryService(repo).create_category(CategoryCreate(name="Kitchen"))

        assert exc_info.value.error_code == "category_exists"

    async def test_unique_violation_on_insert(self, repo):
        repo.create.side_effect = IntegrityError("INSERT INTO categories", {}, Exception("UNIQUE"))

        with pytest.raises(ValidationError) as exc_info:
            await CategoryService(repo).create_category(CategoryCreate(name="Kitchen"))

        assert exc_info.value.error_code == "category_exists"


class TestMoveCategory:
    async def test_move_relevels_subtree(self, repo, tree):
        result = await CategoryService(repo).update_category(
            tree["mugs"].id, CategoryUpdate(parent_id=tree["garden"].id)
        )

        assert result.parent_id == tree["garden"].id
        assert result.level == 1
        assert tree["travel"].level == 2

    async def test_move_to_root(self, repo, tree):
        await CategoryService(repo).update_category(
            tree["mugs"].id, CategoryUpdate.model_validate({"parent_id": None})
        )

        assert tree["mugs"].parent_id is None
        assert tree["mugs"].level == 0
        assert tree["travel"].level == 1

    async def test_own_parent(self, repo, tree):
        with pytest.raises(ValidationError) as exc_info:
            await CategoryService(repo).update_category(
                tree["mugs"].id, CategoryUpdate(parent_id=tree["mugs"].id)
            )

        assert exc_info.value.error_code == "category_cycle"

    async def test_under_own_descendant(self, repo, tree):
        with pytest.raises(ValidationError) as exc_info:
            await CategoryService(repo).update_category(
                tree["kitchen"].id, CategoryUpdate(parent_id=tree["travel"].id)
            )

        assert exc_info.value.error_code == "category_cycle"
        assert tree["kitchen"].parent_id is None
        repo.update.assert_not_awaited()

    async def test_omitted_parent_is_left_alone(self, repo, tree):
        result = await CategoryService(repo).update_category(
            tree["mugs"].id, CategoryUpdate(name="Cups")
        )

        assert result.name == "Cups"
        assert result.parent_id == tree["kitchen"].id


class TestDeleteCategory:
    async def test_delete_leaf(self, repo, tree):
        await CategoryService(repo).delete_category(tree["travel"].id)

        repo.delete.assert_awaited_once_with(tree["travel"])

    async def test_refuses_with_children(self, repo, tree):
        repo.count_children.return_value = 1

        with pytest.raises(ValidationError) as exc_info:
            await CategoryService(repo).delete_category(tree["kitchen"].id)

        assert exc_info.value.error_code == "category_has_children"
        repo.delete.assert_not_awaited()

    async def test_refuses_with_products(self, repo, tree):
        repo.count_products.return_value = 3

        with pytest.raises(ValidationError) as exc_info:
            await CategoryService(repo).delete_category(tree["travel"].id)

        assert exc_info.value.error_code == "category_has_products"

    async def test_missing(self, repo):
        with pytest.raises(NotFoundError):
            await CategoryService(repo).delete_category(uuid4())
