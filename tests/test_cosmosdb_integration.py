"""Integration tests against a real Cosmos DB account or the local emulator.

Skipped unless COSMOSDB_ENDPOINT and COSMOSDB_KEY are set. Each run uses
a throwaway container partitioned on /id and deletes it afterwards.
"""

import os
import uuid

import pytest
from azure.cosmos import PartitionKey
from azure.cosmos.aio import CosmosClient

from products_api.crud.product_crud import (
    create_product,
    delete_product,
    get_product_by_id,
    list_products,
    update_product,
)
from products_api.exceptions import ProductNotFoundError
from products_api.models.product import ProductCreate, ProductUpdate

pytestmark = pytest.mark.skipif(
    not (os.environ.get("COSMOSDB_ENDPOINT") and os.environ.get("COSMOSDB_KEY")),
    reason="Cosmos DB credentials not configured (COSMOSDB_ENDPOINT, COSMOSDB_KEY)",
)


@pytest.fixture
async def cosmos_container():
    database_name = os.environ.get("COSMOSDB_DATABASE", "inventory")
    container_name = f"test-products-{uuid.uuid4().hex[:8]}"

    async with CosmosClient(os.environ["COSMOSDB_ENDPOINT"], os.environ["COSMOSDB_KEY"]) as client:
        database = await client.create_database_if_not_exists(database_name)
        container = await database.create_container_if_not_exists(
            id=container_name, partition_key=PartitionKey(path="/id")
        )
        yield container
        await database.delete_container(container_name)


@pytest.mark.asyncio
async def test_product_lifecycle(cosmos_container):
    created = await create_product(
        cosmos_container,
        ProductCreate(name="iPhone", description="Good phone", price=10000),
    )

    fetched = await get_product_by_id(cosmos_container, created.id)
    assert fetched.id == created.id
    assert fetched.name == "iPhone"

    updated = await update_product(cosmos_container, created.id, ProductUpdate(name="macbook"))
    assert updated.name == "macbook"
    assert updated.description == "Good phone"

    assert [p.id for p in await list_products(cosmos_container)] == [created.id]

    await delete_product(cosmos_container, created.id)
    with pytest.raises(ProductNotFoundError):
        await get_product_by_id(cosmos_container, created.id)
    with pytest.raises(ProductNotFoundError):
        await delete_product(cosmos_container, created.id)


@pytest.mark.asyncio
async def test_absent_id_is_not_found(cosmos_container):
    with pytest.raises(ProductNotFoundError):
        await get_product_by_id(cosmos_container, str(uuid.uuid4()))
