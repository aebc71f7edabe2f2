from azure.cosmos.exceptions import CosmosHttpResponseError
from azure.cosmos.aio import ContainerProxy
import uuid
from typing import List
from datetime import datetime, timezone

from pydantic import ValidationError

from products_api.models.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
)

from products_api.exceptions import (
    ProductNotFoundError,
    ProductAlreadyExistsError,
    DatabaseError,
)

from products_api.logging_config import get_child_logger, tracer

logger = get_child_logger("crud.product")


def is_valid_product_id(product_id: str) -> bool:
    """
    Check that an ID has the shape the store assigns (a UUID string).
    """
    try:
        uuid.UUID(product_id)
    except (ValueError, TypeError):
        return False
    return True


def _ensure_valid_id(product_id: str) -> None:
    # Malformed IDs can never match a document; report them as absent
    if not is_valid_product_id(product_id):
        logger.info("Rejected malformed product ID", extra={"product_id": product_id})
        raise ProductNotFoundError(f"Product with ID '{product_id}' not found")


async def list_products(container: ContainerProxy) -> List[ProductResponse]:
    """
    Retrieve every product in the container.
    """
    with tracer.start_as_current_span("list_products") as span:
        logger.info("Listing products")

        try:
            items = []
            async for item in container.read_all_items():
                try:
                    items.append(ProductResponse.model_validate(item))
                except ValidationError as e:
                    logger.debug(f"Pydantic validation errors: {e.errors()}")
                    continue

            logger.info(f"Retrieved {len(items)} products", extra={"count": len(items)})
            span.set_attribute("products.count", len(items))
            return items

        except CosmosHttpResponseError as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", "cosmos_http_error")
            span.set_attribute("error.status_code", e.status_code)

            logger.error(
                "Cosmos DB error during product listing",
                extra={"status_code": e.status_code, "error_message": e.message},
                exc_info=True,
            )
            raise DatabaseError(
                f"Cosmos DB error during product listing: Status Code {e.status_code}, Message: {e.message}",
                original_exception=e,
            ) from e
        except Exception as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", type(e).__name__)

            logger.error(
                "Unexpected error during product listing",
                extra={"error_type": type(e).__name__},
                exc_info=True
            )
            raise DatabaseError(
                "An unexpected error occurred during database operation.",
                original_exception=e,
            ) from e


async def create_product(
    container: ContainerProxy, product: ProductCreate
) -> ProductResponse:
    """
    Create a new product in the database.

    Args:
        container: Cosmos DB container client
        product: Validated product data to create

    Returns:
        Newly created product with its assigned ID

    Raises:
        ProductAlreadyExistsError: If a product with the same ID exists
        DatabaseError: If a database operation fails
    """
    with tracer.start_as_current_span("create_product") as span:
        data = product.model_dump()
        data["id"] = str(uuid.uuid4())
        data["last_updated"] = datetime.now(timezone.utc).isoformat()

        span.set_attribute("product.id", data["id"])
        span.set_attribute("product.name", data["name"])

        logger.info(
            "Creating new product",
            extra={"product_id": data["id"], "product_name": data["name"]}
        )

        try:
            result = await container.create_item(body=data)
            logger.info(
                "Product created successfully",
                extra={"product_id": data["id"]}
            )
            return ProductResponse.model_validate(result)
        except CosmosHttpResponseError as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", "cosmos_http_error")
            span.set_attribute("error.status_code", e.status_code)

            if e.status_code == 409:
                logger.warning(
                    "Product already exists",
                    extra={"product_id": data["id"]}
                )
                raise ProductAlreadyExistsError(
                    f"Product with ID {data['id']} already exists"
                ) from e

            logger.error(
                "Cosmos DB error during product creation",
                extra={
                    "status_code": e.status_code,
                    "error_message": e.message,
                    "product_id": data["id"],
                },
                exc_info=True,
            )
            raise DatabaseError(
                f"Cosmos DB error during product creation: Status Code {e.status_code}, Message: {e.message}",
                original_exception=e,
            ) from e
        except Exception as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", type(e).__name__)

            logger.error(
                "Unexpected error during product creation",
                extra={"error_type": type(e).__name__, "product_id": data["id"]},
                exc_info=True
            )
            raise DatabaseError(
                "An unexpected error occurred during database operation.",
                original_exception=e,
            ) from e


async def get_product_by_id(
    container: ContainerProxy, product_id: str
) -> ProductResponse:
    """
    Retrieve a product by its ID.

    Args:
        container: Cosmos DB container client
        product_id: ID of the product to retrieve (also its partition key)

    Returns:
        The retrieved product details

    Raises:
        ProductNotFoundError: If the product doesn't exist or the ID is malformed
        DatabaseError: If a database operation fails
    """
    with tracer.start_as_current_span("get_product_by_id") as span:
        span.set_attribute("product.id", product_id)
        _ensure_valid_id(product_id)

        logger.info("Retrieving product by ID", extra={"product_id": product_id})

        try:
            item = await container.read_item(item=product_id, partition_key=product_id)
            logger.info("Product retrieved successfully", extra={"product_id": product_id})
            return ProductResponse.model_validate(item)
        except CosmosHttpResponseError as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", "cosmos_http_error")
            span.set_attribute("error.status_code", e.status_code)

            if e.status_code == 404:
                logger.warning("Product not found", extra={"product_id": product_id})
                raise ProductNotFoundError(
                    f"Product with ID '{product_id}' not found"
                ) from e

            logger.error(
                "Cosmos DB error retrieving product",
                extra={
                    "product_id": product_id,
                    "status_code": e.status_code,
                    "error_message": e.message
                },
                exc_info=True,
            )
            raise DatabaseError(
                f"Cosmos DB error retrieving product {product_id}: Status {e.status_code}, Msg: {e.message}",
                original_exception=e,
            ) from e
        except Exception as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", type(e).__name__)

            logger.error(
                "Unexpected error retrieving product",
                extra={"product_id": product_id, "error_type": type(e).__name__},
                exc_info=True
            )
            raise DatabaseError(
                "An unexpected error occurred during database operation.",
                original_exception=e,
            ) from e


async def update_product(
    container: ContainerProxy,
    product_id: str,
    updates: ProductUpdate,
) -> ProductResponse:
    """
    Merge the provided fields into an existing product.

    Fields not present in ``updates`` keep their stored values. An update
    with no fields returns the current record.

    Raises:
        ProductNotFoundError: If the product doesn't exist or the ID is malformed
        DatabaseError: If a database operation fails
    """
    _ensure_valid_id(product_id)
    update_dict = updates.model_dump(exclude_unset=True)

    if not update_dict:
        return await get_product_by_id(container, product_id)

    update_dict["last_updated"] = datetime.now(timezone.utc).isoformat()

    patch_operations = []
    for key, value in update_dict.items():
        if key != "id":  # id is immutable
            patch_operations.append({"op": "set", "path": f"/{key}", "value": value})

    try:
        result = await container.patch_item(
            item=product_id,
            partition_key=product_id,
            patch_operations=patch_operations,
        )
        logger.info(
            "Product updated successfully",
            extra={"product_id": product_id, "fields": sorted(update_dict)}
        )
        return ProductResponse.model_validate(result)
    except CosmosHttpResponseError as e:
        if e.status_code == 404:
            raise ProductNotFoundError(
                f"Product with ID '{product_id}' not found"
            ) from e
        logger.error(
            f"Cosmos DB error during product update: Status Code {e.status_code}, Message: {e.message}",
            exc_info=True,
        )
        raise DatabaseError(
            f"Cosmos DB error during product update: Status Code {e.status_code}, Message: {e.message}",
            original_exception=e,
        ) from e
    except Exception as e:
        logger.error(f"Unexpected error during product update: {e}", exc_info=True)
        raise DatabaseError(
            "An unexpected error occurred during database operation.",
            original_exception=e,
        ) from e


async def delete_product(
    container: ContainerProxy,
    product_id: str,
) -> None:
    """
    Delete a product from the database.

    Raises:
        ProductNotFoundError: If the product doesn't exist or the ID is malformed
        DatabaseError: If a database operation fails
    """
    _ensure_valid_id(product_id)

    try:
        await container.delete_item(item=product_id, partition_key=product_id)
        logger.info("Product deleted", extra={"product_id": product_id})
    except CosmosHttpResponseError as e:
        if e.status_code == 404:
            raise ProductNotFoundError(
                f"Product with ID '{product_id}' not found"
            ) from e
        logger.error(
            f"Cosmos DB error during product deletion: Status Code {e.status_code}, Message: {e.message}",
            exc_info=True,
        )
        raise DatabaseError(
            f"Cosmos DB error during product deletion: Status Code {e.status_code}, Message: {e.message}",
            original_exception=e,
        ) from e
    except Exception as e:
        logger.error(f"Unexpected error during product deletion: {e}", exc_info=True)
        raise DatabaseError(
            "An unexpected error occurred during database operation.",
            original_exception=e,
        ) from e
