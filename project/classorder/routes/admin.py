# classorder/routes/admin.py

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request, status

from classorder.routes.auth import require_admin
from classorder.schemas.base import OkResponse
from classorder.schemas.order import Order, OrderListResponse, OrderResponse, OrderStatusUpdate
from classorder.services.capacity import order_summary
from classorder.services.order import (
    delete_order_service,
    read_orders_service,
    update_order_status_service,
)
from classorder.utils.errors import StoreError

router = APIRouter(dependencies=[Depends(require_admin)])

# ────────────── READ ALL ──────────────
@router.get(
    "",
    response_model=OrderListResponse,
    status_code=status.HTTP_200_OK,
    summary="Список заказов со сводкой",
    responses={
        200: {"description": "Заказы (новые сверху) и сводка по статусам и слотам"},
        401: {"description": "Нет действующего admin cookie"},
        500: {"description": "Ошибка хранилища"},
    },
)
async def read_orders(
    request: Request,
    status: Optional[str] = None,
    schedule: Optional[str] = None,
):
    try:
        orders = await read_orders_service(request, status, schedule)
    except HTTPException:
        raise
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при получении списка заказов: {e}")
        raise StoreError("Failed to fetch orders")

    return OrderListResponse(
        orders=[Order.model_validate(o) for o in orders],
        summary=order_summary(orders),
    )


# ────────────── UPDATE STATUS ──────────────
@router.patch(
    "/{id}",
    response_model=OrderResponse,
    status_code=status.HTTP_200_OK,
    summary="Сменить статус заказа",
    responses={
        200: {"description": "Статус обновлён"},
        400: {"description": "Статус не из pending / confirmed / cancelled"},
        401: {"description": "Нет действующего admin cookie"},
        404: {"description": "Заказ не найден"},
        500: {"description": "Ошибка хранилища"},
    },
)
async def update_order_status(
    id: str,
    body: OrderStatusUpdate,
    request: Request,
):
    try:
        db_order = await update_order_status_service(id, body.status, request)
        return OrderResponse(order=Order.model_validate(db_order))
    except HTTPException:
        raise
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при обновлении заказа: {e}", {"id": id})
        raise StoreError("Failed to update order")


# ────────────── DELETE ──────────────
@router.delete(
    "/{id}",
    response_model=OkResponse,
    status_code=status.HTTP_200_OK,
    summary="Удалить заказ",
    responses={
        200: {"description": "Заказ удалён"},
        400: {"description": "Пустой id"},
        401: {"description": "Нет действующего admin cookie"},
        404: {"description": "Заказ не найден"},
        500: {"description": "Ошибка хранилища"},
    },
)
async def delete_order(
    id: str,
    request: Request,
):
    try:
        await delete_order_service(id, request)
    except HTTPException:
        raise
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при удалении заказа: {e}", {"id": id})
        raise StoreError("Failed to delete order")
    return OkResponse()
