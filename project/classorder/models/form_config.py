# classorder/models/form_config.py

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON
from classorder.utils.database import Base

# единственная строка конфигурации
FORM_CONFIG_ID = 1


class FormConfig(Base):
    __tablename__ = "form_config"

    id = Column(Integer, primary_key=True, default=FORM_CONFIG_ID)

    schedules           = Column(JSON, nullable=True)       # [{"time": ..., "capacity": ...}]
    details             = Column(Text, nullable=True)       # Условия / предупреждения
    bank_name           = Column(String, nullable=True)
    account_number      = Column(String, nullable=True)
    depositor           = Column(String, nullable=True)
    price               = Column(String, nullable=True)     # Цена tree, только цифры
    wreath_price        = Column(String, nullable=True)     # Цена wreath, только цифры
    background_image    = Column(Text, nullable=True)
    email_notifications = Column(Boolean, nullable=False, default=False)
    admin_email         = Column(String, nullable=True)
    updated_at          = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
