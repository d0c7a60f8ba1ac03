# classorder/routes/order.py

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request, status

from classorder.config import settings
from classorder.schemas.order import Order, OrderCreate, OrderResponse
from classorder.services.form_config import read_form_config_service
from classorder.services.notification import EmailSettings
from classorder.services.order import create_order_service
from classorder.utils.errors import StoreError

router = APIRouter()

# ────────────── CREATE (публичная форма) ──────────────
@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Оформить заказ",
    response_description="Созданный заказ",
    responses={
        201: {"description": "Заказ создан, уведомления отправляются в фоне"},
        400: {"description": "Не заполнены обязательные поля, нет согласия или не хватает мест"},
        500: {"description": "Ошибка хранилища"},
    },
)
async def create_order(
    request: Request,
    order: OrderCreate,
    background_tasks: BackgroundTasks,
):
    log = request.app.state.log
    try:
        db_order = await create_order_service(order, request)
        created = Order.model_validate(db_order)
        config = await read_form_config_service(request)
    except HTTPException:
        raise
    except Exception as e:
        await log.log_error("order", f"Ошибка при создании заказа: {e}")
        raise StoreError("Failed to submit order")

    # соединение возвращается в пул до рассылки: фоновые задачи идут внутри того же запроса
    await request.state.db.close()

    email_settings = EmailSettings(
        enabled=config.email_notifications,
        admin_email=config.admin_email or settings.ADMIN_EMAIL,
    )
    # уведомления уходят после ответа, клиент их не ждёт
    background_tasks.add_task(request.app.state.notifier.notify, created, email_settings)

    return OrderResponse(order=created)
