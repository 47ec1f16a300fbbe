import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from catalog.database.models import ProductDraft
from catalog.database.mongo_real import CategoryStore, ProductStore
from catalog.error_handler import StoreError


class FakeAck:
    def __init__(self, inserted_id=None, matched_count=0, deleted_count=0):
        self.inserted_id = inserted_id
        self.matched_count = matched_count
        self.deleted_count = deleted_count


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    async def to_list(self, length=None):
        return list(self._docs)


class FakeCollection:
    """Just enough of pymongo's AsyncCollection for the catalog adapters."""

    def __init__(self, docs=None, lookup_from=None):
        self.docs = {d["_id"]: d for d in (docs or [])}
        self.lookup_from = lookup_from
        self.pipelines = []

    async def insert_one(self, doc):
        _id = ObjectId()
        self.docs[_id] = {"_id": _id, **doc}
        return FakeAck(inserted_id=_id)

    def find(self, query):
        wanted = query["_id"]["$in"]
        return FakeCursor([d for _id, d in self.docs.items() if _id in wanted])

    async def find_one(self, query):
        return self.docs.get(query["_id"])

    async def update_one(self, query, update):
        doc = self.docs.get(query["_id"])
        if doc is None:
            return FakeAck(matched_count=0)
        doc.update(update["$set"])
        return FakeAck(matched_count=1)

    async def delete_one(self, query):
        return FakeAck(deleted_count=1 if self.docs.pop(query["_id"], None) else 0)

    async def aggregate(self, pipeline):
        self.pipelines.append(pipeline)
        out = []
        for doc in self.docs.values():
            joined = [c for c in self.lookup_from.docs.values() if c["_id"] in doc.get("categoryIds", [])]
            out.append({**doc, "categories": joined})
        return FakeCursor(out)


class BrokenCollection:
    async def insert_one(self, doc):
        raise ServerSelectionTimeoutError("no servers")

    async def find_one(self, query):
        raise ServerSelectionTimeoutError("no servers")


@pytest.mark.asyncio
async def test_category_create_and_get_many():
    store = CategoryStore(FakeCollection())
    tools = await store.create("Tools")
    assert (await store.get_many([tools.id, ObjectId()]))[0].name == "Tools"
    assert await store.get_many([]) == []


@pytest.mark.asyncio
async def test_product_insert_keeps_native_ids():
    products = FakeCollection()
    store = ProductStore(products, "categories")
    cid = ObjectId()

    product = await store.insert(ProductDraft("Hammer", "Steel", 9.99, [cid]))

    assert products.docs[product.id]["categoryIds"] == [cid]
    assert (await store.find_by_id(product.id)).category_ids == [cid]
    assert await store.find_by_id(ObjectId()) is None


@pytest.mark.asyncio
async def test_replace_and_remove_report_matches():
    store = ProductStore(FakeCollection(), "categories")
    product = await store.insert(ProductDraft("Hammer", "Steel", 9.99, []))

    assert await store.replace(product.id, ProductDraft("Mallet", "Rubber", 3.0, [])) is True
    assert (await store.find_by_id(product.id)).name == "Mallet"
    assert await store.replace(ObjectId(), ProductDraft("x", "y", 1.0, [])) is False
    assert await store.remove(product.id) is True
    assert await store.remove(product.id) is False


@pytest.mark.asyncio
async def test_list_all_joined_uses_lookup_and_orders_categories():
    categories = FakeCollection()
    cat_store = CategoryStore(categories)
    a = await cat_store.create("A")
    b = await cat_store.create("B")
    products = FakeCollection(lookup_from=categories)
    store = ProductStore(products, "categories")
    await store.insert(ProductDraft("Hammer", "Steel", 9.99, [b.id, ObjectId(), a.id]))

    views = await store.list_all_joined()

    lookup = products.pipelines[0][1]["$lookup"]
    assert lookup["from"] == "categories"
    assert lookup["localField"] == "categoryIds"
    assert [c.name for c in views[0].categories] == ["B", "A"]


@pytest.mark.asyncio
async def test_driver_errors_become_store_errors():
    with pytest.raises(StoreError):
        await CategoryStore(BrokenCollection()).create("Tools")
    with pytest.raises(StoreError):
        await ProductStore(BrokenCollection(), "categories").find_by_id(ObjectId())
