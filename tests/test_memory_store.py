import pytest
from bson import ObjectId

from catalog.database.models import ProductDraft


@pytest.mark.asyncio
async def test_category_create_assigns_fresh_ids(db):
    a = await db.categories.create("Tools")
    b = await db.categories.create("Tools")
    assert a.id != b.id
    assert a.name == b.name == "Tools"


@pytest.mark.asyncio
async def test_get_many_returns_only_existing_subset(db):
    tools = await db.categories.create("Tools")
    garden = await db.categories.create("Garden")
    found = await db.categories.get_many({tools.id, garden.id, ObjectId()})
    assert {c.id for c in found} == {tools.id, garden.id}
    assert await db.categories.get_many(set()) == []


@pytest.mark.asyncio
async def test_insert_stores_category_ids_verbatim_without_existence_check(db):
    missing = ObjectId()
    product = await db.products.insert(ProductDraft("Hammer", "Steel", 9.99, [missing, missing]))
    stored = await db.products.find_by_id(product.id)
    assert stored.category_ids == [missing, missing]


@pytest.mark.asyncio
async def test_find_by_id_unknown_returns_none(db):
    assert await db.products.find_by_id(ObjectId()) is None


@pytest.mark.asyncio
async def test_replace_overwrites_every_mutable_field(db):
    cat = await db.categories.create("Tools")
    product = await db.products.insert(ProductDraft("Hammer", "Steel", 9.99, [cat.id]))

    assert await db.products.replace(product.id, ProductDraft("Mallet", "Rubber", 5.0, [])) is True

    stored = await db.products.find_by_id(product.id)
    assert (stored.id, stored.name, stored.about, stored.price, stored.category_ids) == (product.id, "Mallet", "Rubber", 5.0, [])


@pytest.mark.asyncio
async def test_replace_and_remove_report_missing_ids(db):
    assert await db.products.replace(ObjectId(), ProductDraft("x", "y", 1, [])) is False
    assert await db.products.remove(ObjectId()) is False


@pytest.mark.asyncio
async def test_remove_deletes_record(db):
    product = await db.products.insert(ProductDraft("Hammer", "Steel", 9.99, []))
    assert await db.products.remove(product.id) is True
    assert await db.products.find_by_id(product.id) is None
    assert await db.products.remove(product.id) is False


@pytest.mark.asyncio
async def test_returned_records_do_not_alias_the_store(db):
    product = await db.products.insert(ProductDraft("Hammer", "Steel", 9.99, []))
    product.category_ids.append(ObjectId())
    stored = await db.products.find_by_id(product.id)
    assert stored.category_ids == []


@pytest.mark.asyncio
async def test_list_all_joined_drops_unresolved_categories_but_keeps_product(db):
    tools = await db.categories.create("Tools")
    garden = await db.categories.create("Garden")
    ghost = ObjectId()
    hammer = await db.products.insert(ProductDraft("Hammer", "Steel", 9.99, [garden.id, ghost, tools.id, garden.id]))
    orphan = await db.products.insert(ProductDraft("Orphan", "", 1.0, [ghost]))

    views = await db.products.list_all_joined()

    assert [v.product.id for v in views] == [hammer.id, orphan.id]
    assert [c.name for c in views[0].categories] == ["Garden", "Tools"]
    assert views[1].categories == []
    assert views[0].product.category_ids == [garden.id, ghost, tools.id, garden.id]


@pytest.mark.asyncio
async def test_list_all_joined_empty_store(db):
    assert await db.products.list_all_joined() == []
