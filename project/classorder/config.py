# classorder/config.py

from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    APP_NAME: str = "Class Order API"
    BRAND_NAME: str = "변화 x Piri Flore"
    ENVIRONMENT: str = "development"

    DATABASE_URL: str = ""          # URL хранилища вместе с сервисным паролем
    ADMIN_PASSWORD: str = ""        # пустой пароль отключает админку целиком

    # active: pending + confirmed занимают места, confirmed: только confirmed
    CAPACITY_POLICY: Literal["active", "confirmed"] = "active"

    # SMS (Twilio)
    TWILIO_ACCOUNT_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    TWILIO_FROM_NUMBER: Optional[str] = None
    ADMIN_PHONE_NUMBER: Optional[str] = None
    CONTACT_PHONE: str = "010-4086-6231"

    # вебхук (мост к KakaoTalk и т.п.)
    NOTIFY_WEBHOOK_URL: Optional[str] = None

    # email (Resend)
    RESEND_API_KEY: Optional[str] = None
    EMAIL_FROM: str = "Class Notification <onboarding@resend.dev>"
    ADMIN_EMAIL: Optional[str] = None

    HTTP_TIMEOUT: float = 5.0

    LOG_DIR: str = "log"
    LOG_PRINT: str = "1"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

settings = Settings()
