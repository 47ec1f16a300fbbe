"""
Catalog endpoints: categories, products and the product change stream.

Writes answer first and broadcast afterwards: the change event is attached
as a background task, which Starlette runs once the response has been sent.
"""

import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, WebSocket, status
from fastapi.responses import JSONResponse

from catalog.error_handler import PayloadValidationError
from catalog.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

api = APIRouter()


def get_service(request: Request) -> CatalogService:
    return request.app.state.context.service


async def _json_body(request: Request):
    raw = await request.body()
    try:
        return json.loads(raw) if raw else None
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PayloadValidationError([{"loc": ["body"], "msg": f"Malformed JSON: {e}", "type": "json_invalid"}])


# --------------------------------------------------------------------------- #
# Categories
# --------------------------------------------------------------------------- #
@api.post("/categories", tags=["Categories"])
async def create_category(request: Request, service: CatalogService = Depends(get_service)):
    category = await service.create_category(await _json_body(request))
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=category.to_dict())


# --------------------------------------------------------------------------- #
# Products
# --------------------------------------------------------------------------- #
@api.post("/products", tags=["Products"])
async def create_product(
    request: Request,
    background_tasks: BackgroundTasks,
    service: CatalogService = Depends(get_service),
):
    mutation = await service.create_product(await _json_body(request))
    background_tasks.add_task(service.publish, mutation.event)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=mutation.product.to_dict())


@api.get("/products", tags=["Products"])
async def list_products(service: CatalogService = Depends(get_service)):
    """All products, each with its resolvable categories joined in."""
    views = await service.list_products()
    return JSONResponse(content=[v.to_dict() for v in views])


@api.get("/products/{product_id}", tags=["Products"])
async def get_product(product_id: str, service: CatalogService = Depends(get_service)):
    product = await service.get_product(product_id)
    return JSONResponse(content=product.to_dict())


@api.put("/products/{product_id}", tags=["Products"])
async def replace_product(
    product_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    service: CatalogService = Depends(get_service),
):
    mutation = await service.replace_product(product_id, await _json_body(request))
    background_tasks.add_task(service.publish, mutation.event)
    return JSONResponse(content={"message": "Product updated"})


@api.delete("/products/{product_id}", tags=["Products"])
async def delete_product(
    product_id: str,
    background_tasks: BackgroundTasks,
    service: CatalogService = Depends(get_service),
):
    mutation = await service.delete_product(product_id)
    background_tasks.add_task(service.publish, mutation.event)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --------------------------------------------------------------------------- #
# Change stream
# --------------------------------------------------------------------------- #
@api.websocket("/ws/products")
async def product_changes(websocket: WebSocket):
    """
    Push every product change to the connected client.

    - Messages: {"action": "created", "product": {...}} or
      {"action": "updated" | "deleted", "id": "..."}.
    - Best effort: events sent while disconnected are not replayed.
    - Frames sent by the client are ignored.
    """
    bus = websocket.app.state.context.bus
    await websocket.accept()
    bus.subscribe(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        bus.unsubscribe(websocket)
