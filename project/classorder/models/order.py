# classorder/models/order.py

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from classorder.utils.database import Base

ORDER_STATUSES = ("pending", "confirmed", "cancelled")
PRODUCT_TYPES = ("tree", "wreath")


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_new_id)

    name         = Column(String, nullable=False)                   # Имя клиента
    phone        = Column(String, nullable=False)                   # Телефон
    schedule     = Column(String, nullable=False, index=True)       # Метка слота, совпадает с time в конфиге
    agreed       = Column(Boolean, nullable=False, default=False)   # Согласие с условиями
    people_count = Column(Integer, nullable=False, default=1)       # Кол-во человек
    total_amount = Column(Integer, nullable=False, default=0)       # Сумма, KRW
    product_type = Column(String, nullable=False, default="tree")   # tree | wreath
    status       = Column(String, nullable=False, default="pending", index=True)
    created_at   = Column(DateTime(timezone=True), nullable=False, default=_now)

    def __repr__(self):
        return f"<Order(id={self.id}, schedule='{self.schedule}', status='{self.status}')>"
