from typing import Optional, Union
from azure.cosmos.aio import CosmosClient, ContainerProxy
from azure.identity.aio import DefaultAzureCredential

from products_api.config import Settings
from products_api.logging_config import get_child_logger

logger = get_child_logger("db")


class CosmosStore:
    """
    Process-wide owner of the Cosmos DB client.

    The client is created on first use and shared by every request;
    ``close()`` releases it (and the credential) at shutdown.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client: Optional[CosmosClient] = None
        self._credential: Optional[DefaultAzureCredential] = None

    def _ensure_client(self) -> CosmosClient:
        if self._client is None:
            credential: Union[str, DefaultAzureCredential]
            if self.settings.cosmosdb_key:
                logger.info("Creating CosmosDB client with account key")
                credential = self.settings.cosmosdb_key
            else:
                logger.info("Creating CosmosDB client with DefaultAzureCredential")
                self._credential = DefaultAzureCredential()
                credential = self._credential
            self._client = CosmosClient(self.settings.cosmosdb_endpoint, credential)
        return self._client

    async def get_container(self) -> ContainerProxy:
        client = self._ensure_client()
        database = client.get_database_client(self.settings.cosmosdb_database)
        return database.get_container_client(self.settings.cosmosdb_container_products)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
        if self._credential is not None:
            await self._credential.close()
            self._credential = None
        logger.info("CosmosDB client closed")
