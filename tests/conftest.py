"""Shared fixtures: an in-memory stand-in for the Cosmos products container."""

import copy
import time
import uuid

import pytest
from azure.cosmos.exceptions import (
    CosmosHttpResponseError,
    CosmosResourceExistsError,
    CosmosResourceNotFoundError,
)
from fastapi.testclient import TestClient

from products_api.app import create_app
from products_api.config import Settings
from products_api.routes.product_route import get_products_container


class InMemoryContainer:
    """Mimics the subset of azure.cosmos.aio.ContainerProxy used by the crud layer."""

    def __init__(self):
        self.items = {}
        self.fail_with = None  # set to an exception to simulate a backend fault

    def _check_fault(self):
        if self.fail_with is not None:
            raise self.fail_with

    def _stamp(self, doc):
        doc["_ts"] = int(time.time())
        doc["_etag"] = f'"{uuid.uuid4()}"'
        doc["_rid"] = "rid"
        return doc

    async def create_item(self, body):
        self._check_fault()
        if body["id"] in self.items:
            raise CosmosResourceExistsError(status_code=409, message="Conflict")
        self.items[body["id"]] = self._stamp(copy.deepcopy(body))
        return copy.deepcopy(self.items[body["id"]])

    def read_all_items(self):
        async def _iterate():
            self._check_fault()
            for doc in list(self.items.values()):
                yield copy.deepcopy(doc)

        return _iterate()

    async def read_item(self, item, partition_key):
        self._check_fault()
        if item not in self.items or partition_key != item:
            raise CosmosResourceNotFoundError(status_code=404, message="NotFound")
        return copy.deepcopy(self.items[item])

    async def patch_item(self, item, partition_key, patch_operations, **kwargs):
        self._check_fault()
        if item not in self.items or partition_key != item:
            raise CosmosResourceNotFoundError(status_code=404, message="NotFound")
        doc = self.items[item]
        for op in patch_operations:
            assert op["op"] == "set"
            doc[op["path"].lstrip("/")] = op["value"]
        self._stamp(doc)
        return copy.deepcopy(doc)

    async def delete_item(self, item, partition_key):
        self._check_fault()
        if item not in self.items or partition_key != item:
            raise CosmosResourceNotFoundError(status_code=404, message="NotFound")
        del self.items[item]


@pytest.fixture
def settings():
    return Settings(cosmosdb_endpoint="https://localhost:8081/", cosmosdb_key="test-key")


@pytest.fixture
def container():
    return InMemoryContainer()


@pytest.fixture
def app(settings, container):
    app = create_app(settings)
    app.dependency_overrides[get_products_container] = lambda: container
    return app


@pytest.fixture
def client(app):
    # Not used as a context manager: the lifespan (and the real Cosmos client) never starts
    return TestClient(app)


@pytest.fixture
def backend_fault():
    return CosmosHttpResponseError(status_code=503, message="Service Unavailable")
