# classorder/services/booking.py

"""
Проверка остатка мест перед созданием заказа.

Проверка и последующая вставка — две отдельные операции без транзакции
и блокировок: два одновременных заказа могут оба пройти проверку и вместе
превысить вместимость слота. При текущей нагрузке это допустимо; для
строгой гарантии нужна атомарная условная запись на стороне хранилища.
"""

from fastapi import Request
from sqlalchemy import func
from sqlalchemy.future import select

from classorder.models.order import Order as OrderModel
from classorder.schemas.form_config import ScheduleAvailability, ScheduleEntry
from classorder.services.capacity import availability, capacity_for, counted_statuses
from classorder.services.form_config import read_form_config_service
from classorder.utils.errors import CapacityExceededError


async def reserved_for_schedule(db, label: str, statuses) -> int:
    result = await db.execute(
        select(func.coalesce(func.sum(OrderModel.people_count), 0)).where(
            OrderModel.schedule == label,
            OrderModel.status.in_(list(statuses)),
        )
    )
    return int(result.scalar_one())


async def validate_booking(schedule: str, people_count: int, request: Request) -> ScheduleAvailability:
    """
    Пускает заказ, если reserved + people_count <= capacity.
    Слот, которого нет в конфигурации, получает вместимость по умолчанию (100).
    """
    db = request.state.db
    log = request.app.state.log

    config = await read_form_config_service(request)
    capacity = capacity_for(config.schedules, schedule)
    reserved = await reserved_for_schedule(db, schedule, counted_statuses())

    if reserved + people_count > capacity:
        await log.log_warning("order", "Мест недостаточно", {
            "schedule": schedule,
            "capacity": capacity,
            "reserved": reserved,
            "requested": people_count,
        })
        raise CapacityExceededError(remaining=max(0, capacity - reserved))

    return availability(ScheduleEntry(time=schedule, capacity=capacity), reserved)
