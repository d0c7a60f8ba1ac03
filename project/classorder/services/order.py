# classorder/services/order.py

from fastapi import Request
from sqlalchemy.future import select

from classorder.models.order import ORDER_STATUSES, PRODUCT_TYPES, Order as OrderModel
from classorder.schemas.order import OrderCreate
from classorder.services.booking import validate_booking
from classorder.utils.errors import OrderNotFoundError, OrderValidationError, StoreError


def _session(request: Request):
    db = request.state.db
    if db is None:
        raise StoreError()
    return db


def validate_order_fields(order: OrderCreate) -> dict:
    """
    Проверка и нормализация полей публичного заказа.
    name, phone, schedule обязательны, agreed должен быть ровно True.
    """
    name = (order.name or "").strip()
    phone = (order.phone or "").strip()
    schedule = (order.schedule or "").strip()

    if not name or not phone or not schedule or order.agreed is not True:
        raise OrderValidationError("Missing required fields")

    people_count = 1 if order.people_count is None else order.people_count
    if people_count < 1:
        raise OrderValidationError("Invalid people count")

    total_amount = 0 if order.total_amount is None else order.total_amount
    if total_amount < 0:
        raise OrderValidationError("Invalid total amount")

    product_type = (order.product_type or "tree").strip().lower()
    if product_type not in PRODUCT_TYPES:
        raise OrderValidationError("Invalid product type")

    return {
        "name": name,
        "phone": phone,
        "schedule": schedule,
        "agreed": True,
        "people_count": people_count,
        "total_amount": total_amount,
        "product_type": product_type,
        "status": "pending",
    }


async def create_order_service(order: OrderCreate, request: Request) -> OrderModel:
    """
    Создание заказа: проверка полей → проверка мест → вставка.
    """
    log = request.app.state.log
    values = validate_order_fields(order)
    db = _session(request)

    await validate_booking(values["schedule"], values["people_count"], request)

    db_order = OrderModel(**values)
    db.add(db_order)
    await db.commit()
    await db.refresh(db_order)

    await log.log_info("order", "Заказ создан", {
        "id": db_order.id,
        "schedule": db_order.schedule,
        "people_count": db_order.people_count,
    })
    return db_order


async def read_orders_service(
    request: Request, status: str | None = None, schedule: str | None = None
) -> list[OrderModel]:
    """
    Список заказов, новые сверху, с фильтрами по статусу и слоту.
    """
    db = _session(request)
    log = request.app.state.log

    query = select(OrderModel).order_by(OrderModel.created_at.desc())
    if status:
        query = query.where(OrderModel.status == status)
    if schedule:
        query = query.where(OrderModel.schedule == schedule)

    result = await db.execute(query)
    orders = list(result.scalars().all())

    await log.log_info("order", f"{len(orders)} заказов загружено", {"status": status, "schedule": schedule})
    return orders


async def read_order_service(id: str, request: Request) -> OrderModel:
    db = _session(request)
    log = request.app.state.log

    if not id or not id.strip():
        raise OrderValidationError("Missing order id")

    db_order = await db.get(OrderModel, id.strip())
    if db_order is None:
        await log.log_warning("order", "Заказ не найден", {"id": id})
        raise OrderNotFoundError()
    return db_order


async def update_order_status_service(id: str, status: str | None, request: Request) -> OrderModel:
    """
    Смена статуса. Переходы не ограничены, но значение только из ORDER_STATUSES.
    """
    log = request.app.state.log

    if not id or not id.strip() or status not in ORDER_STATUSES:
        await log.log_warning("order", "Некорректный статус", {"id": id, "status": status})
        raise OrderValidationError("Invalid status")

    db = _session(request)
    db_order = await read_order_service(id, request)

    previous = db_order.status
    db_order.status = status
    await db.commit()
    await db.refresh(db_order)

    await log.log_info("order", "Статус заказа обновлён", {"id": id, "from": previous, "to": status})
    return db_order


async def delete_order_service(id: str, request: Request) -> None:
    db = _session(request)
    log = request.app.state.log

    db_order = await read_order_service(id, request)

    await db.delete(db_order)
    await db.commit()
    await log.log_info("order", "Заказ удалён", {"id": id})
