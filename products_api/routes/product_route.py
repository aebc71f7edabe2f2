from typing import List, Optional
from fastapi import APIRouter, Body, HTTPException, Path, Request, Response, status, Depends
from products_api.models.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse
)
from products_api.crud.product_crud import (
    get_product_by_id,
    list_products,
    create_product,
    delete_product,
    update_product
)
from azure.cosmos.aio import ContainerProxy

from products_api.exceptions import (
    ProductNotFoundError,
    ProductAlreadyExistsError,
    DatabaseError
)

from products_api.logging_config import tracer, get_child_logger

logger = get_child_logger("routes.product")

router = APIRouter(prefix="/products", tags=["products"])


async def get_products_container(request: Request) -> ContainerProxy:
    return await request.app.state.store.get_container()


@router.get("", response_model=List[ProductResponse])
async def get_products(
    container: ContainerProxy = Depends(get_products_container),
):
    with tracer.start_as_current_span("api_get_products") as span:
        logger.info("Handling GET /products request")

        try:
            result = await list_products(container=container)

            span.set_attribute("products.count", len(result))
            return result
        except DatabaseError as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", "database_error")

            logger.error(
                "Database error during product listing",
                extra={"error": str(e)},
                exc_info=e.original_exception
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="A database error occurred.",
            )
        except Exception as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", type(e).__name__)

            logger.error(
                "Unexpected error during product listing",
                extra={"error": str(e), "error_type": type(e).__name__},
                exc_info=True
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="An unexpected internal server error occurred.",
            )


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def add_new_product(
    product: ProductCreate = Body(..., description="Product information to create"),
    container: ContainerProxy = Depends(get_products_container),
):
    try:
        return await create_product(container=container, product=product)
    except ProductAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except DatabaseError as e:
        logger.error(f"Database error: {e}", exc_info=e.original_exception)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="A database error occurred.",
        )
    except Exception as e:
        logger.error(f"Unexpected error during product creation: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected internal server error occurred.",
        )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str = Path(..., title="The ID of the product to retrieve"),
    container: ContainerProxy = Depends(get_products_container),
):
    with tracer.start_as_current_span("api_get_product") as span:
        span.set_attribute("product.id", product_id)
        try:
            return await get_product_by_id(container=container, product_id=product_id)
        except ProductNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        except DatabaseError as e:
            span.set_attribute("error", True)
            logger.error(f"Database error: {e}", exc_info=e.original_exception)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="A database error occurred.",
            )
        except Exception as e:
            span.set_attribute("error", True)
            logger.error(
                f"Unexpected error retrieving product {product_id}: {e}", exc_info=True
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="An unexpected internal server error occurred.",
            )


@router.put("/{product_id}", response_model=ProductResponse)
async def update_existing_product(
    updated_product: Optional[ProductUpdate] = Body(None),
    product_id: str = Path(..., title="The ID of the product to update"),
    container: ContainerProxy = Depends(get_products_container),
):
    # A missing body is an empty update, so unknown IDs still report 404
    updates = updated_product or ProductUpdate()
    try:
        return await update_product(
            container=container,
            product_id=product_id,
            updates=updates,
        )
    except ProductNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DatabaseError as e:
        logger.error(
            f"Database error during product update: {e}", exc_info=e.original_exception
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="A database error occurred.",
        )
    except Exception as e:
        logger.error(f"Unexpected error during product update: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected internal server error occurred.",
        )


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_existing_product(
    product_id: str = Path(..., title="The ID of the product to delete"),
    container: ContainerProxy = Depends(get_products_container),
):
    try:
        await delete_product(container=container, product_id=product_id)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DatabaseError as e:
        logger.error(f"Database error: {e}", exc_info=e.original_exception)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="A database error occurred.",
        )
    except Exception as e:
        logger.error(
            f"Unexpected error in DELETE /products/{product_id}: {e}", exc_info=True
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected internal server error occurred.",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
