"""FastAPI endpoints for the Storefront domain."""

import json

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain

from shared.auth import Caller
from shared.cache import PRODUCTS_PATTERN, cache_key
from shared.dependencies import get_settings, get_write_lock, rate_limit, require_admin
from shared.errors import (
    RequestValidationFailed,
    StockConflict,
    StorefrontError,
    error_response,
    new_error_code,
    request_id_of,
)
from shared.logging import get_logger
from storefront.api.dependencies import get_caches, get_placement
from storefront.api.schemas import (
    AddToCartRequest,
    CreateCategoryRequest,
    CreateProductRequest,
    RestockProductRequest,
    UpdateCartRequest,
    UpdateProductRequest,
)
from storefront.cart.management import AddToCart, ChangeCartQuantity, RemoveFromCart
from storefront.cart.queries import cart_view
from storefront.catalogue.management import (
    CreateCategory,
    CreateProduct,
    DeactivateCategory,
    DeactivateProduct,
    DeleteProduct,
    RestockProduct,
    UpdateProduct,
)
from storefront.catalogue.queries import ProductFilters, active_categories, product_detail, search_products
from storefront.checkout.validation import validate_order_request
from storefront.order.queries import my_orders

logger = get_logger(__name__)

product_router = APIRouter(prefix="/products", tags=["products"])
category_router = APIRouter(prefix="/categories", tags=["categories"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])
order_router = APIRouter(prefix="/orders", tags=["orders"])

public_api = rate_limit("PUBLIC_API", prefix="public", authenticated=False)
authenticated_api = rate_limit("AUTHENTICATED_API", prefix="api")


async def _invalidate_products(request: Request):
    await get_caches(request).products.invalidate_pattern(PRODUCTS_PATTERN)


# --- Product endpoints ---


@product_router.get("", dependencies=[Depends(public_api)])
async def list_products(
    request: Request,
    keyword: str | None = Query(None, max_length=100),
    category: str | None = None,
    price_gte: float | None = Query(None, alias="price[gte]", ge=0),
    price_lte: float | None = Query(None, alias="price[lte]", ge=0),
    page: int = Query(1, ge=1),
):
    filters = ProductFilters(keyword=keyword, category=category, price_gte=price_gte, price_lte=price_lte, page=page)
    cache = get_caches(request).products
    key = cache_key("products", filters.as_params())

    data = await cache.get(key)
    if data is None:
        data = search_products(filters, page_size=get_settings(request).products_page_size)
        await cache.set(key, data)
    return {"success": True, "data": data}


@product_router.get("/{product_id}", dependencies=[Depends(public_api)])
async def get_product(product_id: str):
    return {"success": True, "data": product_detail(product_id)}


@product_router.post("", status_code=201, dependencies=[Depends(require_admin)])
async def create_product(request: Request, body: CreateProductRequest):
    command = CreateProduct(
        name=body.name,
        description=body.description,
        price=body.price,
        stock=body.stock,
        category_id=body.category_id,
        images=json.dumps([image.model_dump() for image in body.images]) if body.images else None,
    )
    async with get_write_lock(request):
        product_id = current_domain.process(command, asynchronous=False)
    await _invalidate_products(request)
    return {"success": True, "data": {"id": product_id}}


@product_router.put("/{product_id}", dependencies=[Depends(require_admin)])
async def update_product(request: Request, product_id: str, body: UpdateProductRequest):
    command = UpdateProduct(
        product_id=product_id,
        name=body.name,
        description=body.description,
        price=body.price,
        category_id=body.category_id,
    )
    async with get_write_lock(request):
        current_domain.process(command, asynchronous=False)
    await _invalidate_products(request)
    return {"success": True, "message": "Product updated"}


@product_router.put("/{product_id}/restock", dependencies=[Depends(require_admin)])
async def restock_product(request: Request, product_id: str, body: RestockProductRequest):
    async with get_write_lock(request):
        current_domain.process(RestockProduct(product_id=product_id, quantity=body.quantity), asynchronous=False)
    await _invalidate_products(request)
    return {"success": True, "message": "Product restocked"}


@product_router.put("/{product_id}/deactivate", dependencies=[Depends(require_admin)])
async def deactivate_product(request: Request, product_id: str):
    async with get_write_lock(request):
        current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    await _invalidate_products(request)
    return {"success": True, "message": "Product deactivated"}


@product_router.delete("/{product_id}", dependencies=[Depends(require_admin)])
async def delete_product(request: Request, product_id: str):
    async with get_write_lock(request):
        current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)
    await _invalidate_products(request)
    return {"success": True, "message": "Product deleted"}


# --- Category endpoints ---


@category_router.get("", dependencies=[Depends(public_api)])
async def list_categories():
    return {"success": True, "data": {"categories": active_categories()}}


@category_router.post("", status_code=201, dependencies=[Depends(require_admin)])
async def create_category(request: Request, body: CreateCategoryRequest):
    async with get_write_lock(request):
        category_id = current_domain.process(CreateCategory(name=body.name), asynchronous=False)
    return {"success": True, "data": {"id": category_id}}


@category_router.put("/{category_id}/deactivate", dependencies=[Depends(require_admin)])
async def deactivate_category(request: Request, category_id: str):
    async with get_write_lock(request):
        current_domain.process(DeactivateCategory(category_id=category_id), asynchronous=False)
    await _invalidate_products(request)
    return {"success": True, "message": "Category deactivated"}


# --- Cart endpoints ---


def _cart_key(user_id: str) -> str:
    return cache_key("cart", {"userId": user_id})


async def _fresh_cart(request: Request, user_id: str) -> dict:
    cache = get_caches(request).cart
    await cache.delete(_cart_key(user_id))
    async with get_write_lock(request):
        return cart_view(user_id, max_entries=get_settings(request).max_cart_entries)


@cart_router.get("")
async def get_cart(request: Request, caller: Caller = Depends(authenticated_api)):
    cache = get_caches(request).cart
    key = _cart_key(caller.user_id)

    data = await cache.get(key)
    if data is None:
        async with get_write_lock(request):
            data = cart_view(caller.user_id, max_entries=get_settings(request).max_cart_entries)
        await cache.set(key, data)
    return JSONResponse(
        content={"success": True, "data": data},
        headers={"Cache-Control": "private, max-age=60"},
    )


@cart_router.post("", status_code=201)
async def add_to_cart(request: Request, body: AddToCartRequest, caller: Caller = Depends(authenticated_api)):
    command = AddToCart(user_id=caller.user_id, product_id=body.product_id, quantity=body.quantity)
    async with get_write_lock(request):
        entry_id = current_domain.process(command, asynchronous=False)
    data = await _fresh_cart(request, caller.user_id)
    return {"success": True, "message": "Product added to cart", "data": {**data, "updatedItemId": entry_id}}


@cart_router.put("")
async def update_cart(request: Request, body: UpdateCartRequest, caller: Caller = Depends(authenticated_api)):
    command = ChangeCartQuantity(user_id=caller.user_id, cart_entry_id=body.product.id, change=body.value.value)
    async with get_write_lock(request):
        entry_id = current_domain.process(command, asynchronous=False)
    data = await _fresh_cart(request, caller.user_id)
    operation = "update" if entry_id else "remove"
    return {
        "success": True,
        "message": "Cart quantity updated" if entry_id else "Product removed from cart",
        "data": {**data, "operation": operation, "updatedItemId": entry_id or body.product.id},
    }


@cart_router.delete("/{cart_entry_id}")
async def remove_from_cart(request: Request, cart_entry_id: str, caller: Caller = Depends(authenticated_api)):
    async with get_write_lock(request):
        current_domain.process(RemoveFromCart(user_id=caller.user_id, cart_entry_id=cart_entry_id), asynchronous=False)
    data = await _fresh_cart(request, caller.user_id)
    return {"success": True, "message": "Item deleted from cart", "data": data}


# --- Order endpoints ---

order_placement_limit = rate_limit(
    "CRITICAL_ENDPOINTS",
    prefix="order_webhook",
    message="Too many order requests, please try again later",
)


@order_router.post("/webhook", status_code=201)
async def place_order(request: Request, caller: Caller = Depends(order_placement_limit)):
    """Validate the order payload, reserve stock for every item and create the order."""
    request_id = request_id_of(request)
    logger.info("Order webhook received", content_type=request.headers.get("content-type"))
    try:
        try:
            payload = await request.json()
        except ValueError:
            raise RequestValidationFailed("Invalid order data format") from None

        order_request = validate_order_request(payload)
        result = await get_placement(request).place(caller.user_id, order_request, request_id=request_id)
        if not result.committed:
            raise StockConflict(data={"inavailableStockProducts": result.unavailable})

        return JSONResponse(
            status_code=201,
            content={
                "success": True,
                "id": result.order_id,
                "orderNumber": result.order_number,
                "requestId": request_id,
            },
        )
    except StorefrontError as exc:
        if exc.status_code == 400:
            logger.warning("Order request rejected", message=exc.message, errors=exc.errors)
        return error_response(request, exc)
    except Exception as exc:
        error_code = new_error_code()
        logger.error("Unhandled error in order webhook", error_code=error_code, error=str(exc), exc_info=exc)
        await request.app.state.reporter.capture(
            exc,
            tags={
                "component": "order-webhook",
                "operation": "global-handler",
                "requestId": request_id,
                "errorCode": error_code,
            },
        )
        return error_response(request, StorefrontError(), error_code=error_code)


@order_router.get("/me")
async def get_my_orders(request: Request, page: int = Query(1, ge=1), caller: Caller = Depends(authenticated_api)):
    data = my_orders(caller.user_id, page=page, page_size=get_settings(request).orders_page_size)
    return {"success": True, "data": data}
