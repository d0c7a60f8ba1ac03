# classorder/services/form_config.py

import json
import re
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from sqlalchemy.future import select

from classorder.models.form_config import FORM_CONFIG_ID, FormConfig as FormConfigModel
from classorder.models.order import Order as OrderModel
from classorder.schemas.form_config import FormConfigRecord, FormConfigUpdate, PublicFormConfig, ScheduleEntry
from classorder.services.capacity import DEFAULT_CAPACITY, schedule_availability
from classorder.utils.errors import StoreError

# ────────────── Значения по умолчанию ──────────────
DEFAULT_SCHEDULES = [
    "2024-12-20T19:00",
    "2024-12-21T14:00",
    "2024-12-22T14:00",
]

DEFAULT_DETAILS = """[알러지 및 주의사항]
- 편백·침엽수 등 수목 소재 알러지가 있는 분은 수업 참여 전 주의가 필요합니다.
- 수업 시작 3일 전까지 100% 환불 가능하며, 이후에는 재료 준비로 인해 환불이 불가합니다.
- 수업 시작 10분 전까지 도착해주시기 바랍니다."""

DEFAULT_FORM_CONFIG = {
    "details": DEFAULT_DETAILS,
    "bank_name": "국민은행",
    "account_number": "1234-56-789012",
    "depositor": "변화 x PIRI",
    "price": "80000",
    "wreath_price": "70000",
}


def default_schedules() -> list[ScheduleEntry]:
    return [ScheduleEntry(time=t, capacity=DEFAULT_CAPACITY) for t in DEFAULT_SCHEDULES]


# ────────────── Нормализация ──────────────
def normalize_text(value: Any, default: str | None) -> str | None:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def normalize_price(value: Any, default: str) -> str:
    """Оставляет только цифры. Пустое или нулевое значение → default."""
    if value is None or isinstance(value, bool):
        return default
    digits = re.sub(r"[^0-9]", "", str(value))
    if not digits or int(digits) <= 0:
        return default
    return str(int(digits))


def normalize_capacity(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_CAPACITY
    try:
        capacity = int(str(value).strip())
    except (TypeError, ValueError):
        return DEFAULT_CAPACITY
    return capacity if capacity > 0 else DEFAULT_CAPACITY


def _schedule_item(item: Any) -> ScheduleEntry | None:
    if isinstance(item, ScheduleEntry):
        item = item.model_dump()
    if isinstance(item, dict):
        time = normalize_text(item.get("time"), None)
        if not time:
            return None
        return ScheduleEntry(time=time, capacity=normalize_capacity(item.get("capacity")))
    # старый формат: просто строка
    time = normalize_text(item, None)
    return ScheduleEntry(time=time, capacity=DEFAULT_CAPACITY) if time else None


def normalize_schedules(value: Any) -> list[ScheduleEntry]:
    """
    Приводит расписание к списку {time, capacity}.
    Принимает список строк, список объектов, JSON-строку или строку
    через перевод строки / запятую. Повторы по time схлопываются.
    """
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            value = parsed
        else:
            value = re.split(r"[\n,]+", value)

    if not isinstance(value, (list, tuple)):
        return []

    entries: list[ScheduleEntry] = []
    seen = set()
    for item in value:
        entry = _schedule_item(item)
        if entry is None or entry.time in seen:
            continue
        seen.add(entry.time)
        entries.append(entry)
    return entries


def build_record(row: FormConfigModel | None) -> FormConfigRecord:
    """Собирает конфигурацию, подставляя значения по умолчанию по каждому полю."""
    def field(name):
        return getattr(row, name, None) if row is not None else None

    return FormConfigRecord(
        schedules=normalize_schedules(field("schedules")) or default_schedules(),
        details=field("details") or DEFAULT_FORM_CONFIG["details"],
        bank_name=field("bank_name") or DEFAULT_FORM_CONFIG["bank_name"],
        account_number=field("account_number") or DEFAULT_FORM_CONFIG["account_number"],
        depositor=field("depositor") or DEFAULT_FORM_CONFIG["depositor"],
        price=field("price") or DEFAULT_FORM_CONFIG["price"],
        wreath_price=field("wreath_price") or DEFAULT_FORM_CONFIG["wreath_price"],
        background_image=field("background_image") or None,
        email_notifications=bool(field("email_notifications")),
        admin_email=field("admin_email") or None,
        updated_at=field("updated_at"),
    )


def normalize_update(payload: FormConfigUpdate) -> dict:
    schedules = normalize_schedules(payload.schedules) or default_schedules()
    return {
        "schedules": [entry.model_dump() for entry in schedules],
        "details": normalize_text(payload.details, DEFAULT_FORM_CONFIG["details"]),
        "bank_name": normalize_text(payload.bank_name, DEFAULT_FORM_CONFIG["bank_name"]),
        "account_number": normalize_text(payload.account_number, DEFAULT_FORM_CONFIG["account_number"]),
        "depositor": normalize_text(payload.depositor, DEFAULT_FORM_CONFIG["depositor"]),
        "price": normalize_price(payload.price, DEFAULT_FORM_CONFIG["price"]),
        "wreath_price": normalize_price(payload.wreath_price, DEFAULT_FORM_CONFIG["wreath_price"]),
        "background_image": normalize_text(payload.background_image, None),
        "email_notifications": bool(payload.email_notifications),
        "admin_email": normalize_text(payload.admin_email, None),
    }


# ────────────── READ ──────────────
async def read_form_config_service(request: Request) -> FormConfigRecord:
    """
    Текущая конфигурация формы. Никогда не падает:
    при ошибке хранилища пишет в лог и отдаёт значения по умолчанию.
    """
    db = request.state.db
    log = request.app.state.log

    if db is None:
        await log.log_warning("config", "Хранилище не настроено, отдаём конфигурацию по умолчанию")
        return build_record(None)

    try:
        result = await db.execute(
            select(FormConfigModel).order_by(FormConfigModel.updated_at.desc()).limit(1)
        )
        row = result.scalar_one_or_none()
    except Exception as e:
        await log.log_error("config", f"Не удалось прочитать конфигурацию: {e}")
        await db.rollback()
        return build_record(None)

    return build_record(row)


# ────────────── UPSERT ──────────────
async def save_form_config_service(payload: FormConfigUpdate, request: Request) -> FormConfigRecord:
    """
    Нормализует и перезаписывает единственную строку конфигурации (last-write-wins).
    """
    db = request.state.db
    log = request.app.state.log

    if db is None:
        raise StoreError()

    values = normalize_update(payload)
    values["updated_at"] = datetime.now(timezone.utc)

    db_config = await db.get(FormConfigModel, FORM_CONFIG_ID)
    if db_config is None:
        db_config = FormConfigModel(id=FORM_CONFIG_ID)
        db.add(db_config)

    for key, value in values.items():
        setattr(db_config, key, value)

    await db.commit()
    await db.refresh(db_config)

    await log.log_info("config", "Конфигурация сохранена", {"schedules": values["schedules"]})
    return build_record(db_config)


# ────────────── Публичный вид ──────────────
async def read_public_config_service(request: Request) -> PublicFormConfig:
    """
    GET /config: конфигурация без настроек почты, с остатком мест по слотам.
    Как и чтение конфигурации, никогда не падает.
    """
    db = request.state.db
    log = request.app.state.log

    config = await read_form_config_service(request)

    orders = []
    if db is not None:
        try:
            result = await db.execute(select(OrderModel))
            orders = list(result.scalars().all())
        except Exception as e:
            await log.log_error("config", f"Не удалось прочитать заказы для расчёта мест: {e}")
            await db.rollback()

    return PublicFormConfig(
        **config.model_dump(exclude={"schedules", "email_notifications", "admin_email"}),
        schedules=schedule_availability(config.schedules, orders),
    )
