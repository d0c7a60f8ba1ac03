# classorder/services/capacity.py

from typing import Iterable

from classorder.config import settings
from classorder.models.order import Order as OrderModel
from classorder.schemas.form_config import ScheduleAvailability, ScheduleEntry
from classorder.schemas.order import OrderSummary
from classorder.utils.schedule import format_schedule, parse_schedule_date

DEFAULT_CAPACITY = 100

# Политики учёта мест: какие статусы занимают места
CAPACITY_POLICIES = {
    "active": frozenset({"pending", "confirmed"}),
    "confirmed": frozenset({"confirmed"}),
}


def counted_statuses(policy: str | None = None) -> frozenset:
    policy = (policy or settings.CAPACITY_POLICY).lower()
    if policy not in CAPACITY_POLICIES:
        raise ValueError(f"Неизвестная CAPACITY_POLICY: {policy}")
    return CAPACITY_POLICIES[policy]


def reserved_by_schedule(orders: Iterable[OrderModel], statuses: frozenset) -> dict[str, int]:
    """Сумма people_count по меткам слотов для заказов с учитываемым статусом."""
    reserved: dict[str, int] = {}
    for order in orders:
        if order.status not in statuses:
            continue
        reserved[order.schedule] = reserved.get(order.schedule, 0) + (order.people_count or 1)
    return reserved


def capacity_for(schedules: Iterable[ScheduleEntry], label: str) -> int:
    for entry in schedules:
        if entry.time == label:
            return entry.capacity
    return DEFAULT_CAPACITY


def availability(entry: ScheduleEntry, reserved: int) -> ScheduleAvailability:
    day = parse_schedule_date(entry.time)
    return ScheduleAvailability(
        time=entry.time,
        capacity=entry.capacity,
        reserved=reserved,
        remaining=max(0, entry.capacity - reserved),
        label=format_schedule(entry.time),
        date=day.isoformat() if day else None,
    )


def schedule_availability(
    schedules: Iterable[ScheduleEntry],
    orders: Iterable[OrderModel],
    policy: str | None = None,
) -> list[ScheduleAvailability]:
    """
    Остаток мест по каждому слоту конфигурации.
    Заказы на метки, которых нет в конфигурации, сюда не попадают.
    """
    reserved = reserved_by_schedule(orders, counted_statuses(policy))
    return [availability(entry, reserved.get(entry.time, 0)) for entry in schedules]


def order_summary(orders: Iterable[OrderModel]) -> OrderSummary:
    """
    Сводка для админки. Считает все метки, в том числе удалённые из конфигурации,
    поэтому может не сходиться с публичным остатком мест.
    """
    status_counts: dict[str, int] = {}
    schedule_counts: dict[str, int] = {}
    total = 0
    people = 0

    for order in orders:
        key = order.status or "unknown"
        status_counts[key] = status_counts.get(key, 0) + 1
        if order.status == "cancelled":
            continue
        total += 1
        people += order.people_count or 1
        label = order.schedule or "unspecified"
        schedule_counts[label] = schedule_counts.get(label, 0) + 1

    return OrderSummary(
        total=total,
        people=people,
        status_counts=status_counts,
        schedule_counts=schedule_counts,
    )
