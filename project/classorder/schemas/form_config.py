# classorder/schemas/form_config.py

from datetime import datetime
from typing import Any, List, Optional, Union

from classorder.schemas.base import CamelModel

class ScheduleEntry(CamelModel):
    time: str
    capacity: int = 100

class ScheduleAvailability(ScheduleEntry):
    reserved: int = 0
    remaining: int = 0
    label: str = ""             # "12월 20일 (금) 19:00"
    date: Optional[str] = None  # YYYY-MM-DD, если метку удалось разобрать

class FormConfigUpdate(CamelModel):
    """Тело PUT /config. Всё нормализуется сервисом."""
    schedules: Optional[Any] = None     # список строк, список {time, capacity} или строка
    details: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    depositor: Optional[str] = None
    price: Optional[Union[int, str]] = None
    wreath_price: Optional[Union[int, str]] = None
    background_image: Optional[str] = None
    email_notifications: Optional[bool] = None
    admin_email: Optional[str] = None

class FormConfigRecord(CamelModel):
    schedules: List[ScheduleEntry]
    details: str
    bank_name: str
    account_number: str
    depositor: str
    price: str
    wreath_price: str
    background_image: Optional[str] = None
    email_notifications: bool = False
    admin_email: Optional[str] = None
    updated_at: Optional[datetime] = None

class PublicFormConfig(CamelModel):
    """Ответ GET /config: без настроек почты, с остатком мест."""
    schedules: List[ScheduleAvailability]
    details: str
    bank_name: str
    account_number: str
    depositor: str
    price: str
    wreath_price: str
    background_image: Optional[str] = None
    updated_at: Optional[datetime] = None
