# classorder/schemas/order.py

from datetime import datetime
from typing import Dict, List, Optional
from pydantic import Field, StrictBool

from classorder.schemas.base import CamelModel

# ────────────── Входные данные ──────────────
class OrderCreate(CamelModel):
    # обязательность проверяет сервис, чтобы ответить 400 с понятным текстом
    name: Optional[str] = None
    phone: Optional[str] = None
    schedule: Optional[str] = None
    agreed: Optional[StrictBool] = None
    people_count: Optional[int] = None
    total_amount: Optional[int] = None
    product_type: Optional[str] = None

class OrderStatusUpdate(CamelModel):
    status: Optional[str] = None

# ────────────── Ответы ──────────────
class Order(CamelModel):
    id: str
    name: str
    phone: str
    schedule: str
    agreed: bool
    people_count: int
    total_amount: int
    product_type: str
    status: str
    created_at: datetime

class OrderResponse(CamelModel):
    order: Order

class OrderSummary(CamelModel):
    total: int = Field(..., description="Заказы без cancelled")
    people: int = Field(..., description="Человек в заказах без cancelled")
    status_counts: Dict[str, int]
    schedule_counts: Dict[str, int]

class OrderListResponse(CamelModel):
    orders: List[Order]
    summary: OrderSummary
