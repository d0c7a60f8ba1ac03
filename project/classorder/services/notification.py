# classorder/services/notification.py

import asyncio
import os
from typing import Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import BaseModel

from classorder.config import Settings, settings
from classorder.schemas.order import Order
from classorder.utils.errors import NotificationError
from classorder.utils.log import Log
from classorder.utils.schedule import format_schedule

TWILIO_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"
RESEND_URL = "https://api.resend.com/emails"

_templates = Environment(
    loader=FileSystemLoader(os.path.join(os.path.dirname(__file__), "..", "templates")),
    autoescape=select_autoescape(["html"]),
)


class EmailSettings(BaseModel):
    enabled: bool = False
    admin_email: Optional[str] = None


class NotificationDispatcher:
    """
    Рассылка о новом заказе: SMS (клиенту и админу), вебхук, email.
    Каждый канал необязателен и молча пропускается без настроек.
    Ошибки каналов только логируются и не мешают друг другу.
    """

    def __init__(self, http: httpx.AsyncClient, log: Log, config: Settings = settings):
        self.http = http
        self.log = log
        self.config = config

    # ==========================================================
    # СООБЩЕНИЯ
    # ==========================================================
    @property
    def has_twilio(self) -> bool:
        c = self.config
        return bool(c.TWILIO_ACCOUNT_SID and c.TWILIO_AUTH_TOKEN and c.TWILIO_FROM_NUMBER)

    def build_messages(self, order: Order) -> tuple[str, str]:
        """Тексты SMS для клиента и для админа."""
        brand = self.config.BRAND_NAME
        contact = self.config.ADMIN_PHONE_NUMBER or self.config.CONTACT_PHONE
        schedule = format_schedule(order.schedule)

        user_message = (
            f"[{brand}] 신청이 접수되었습니다.\n"
            f"이름: {order.name}\n"
            f"일정: {schedule}\n"
            f"입금 확인 후 확정 문자/카톡을 드립니다. 문의: {contact}"
        )
        admin_message = (
            f"[{brand} 신청 알림]\n"
            f"이름: {order.name}\n"
            f"연락처: {order.phone}\n"
            f"일정: {schedule}\n"
            f"인원: {order.people_count}인\n"
            f"스테이터스: 신규 대기"
        )
        return user_message, admin_message

    def render_email(self, order: Order) -> str:
        return _templates.get_template("new_order_email.html").render(
            order=order,
            brand=self.config.BRAND_NAME,
            schedule_label=format_schedule(order.schedule),
            product_name="리스" if order.product_type == "wreath" else "트리",
            total_amount=f"{order.total_amount:,}" if order.total_amount else "-",
        )

    # ==========================================================
    # КАНАЛЫ
    # ==========================================================
    async def send_sms(self, to: str, body: str) -> None:
        c = self.config
        resp = await self.http.post(
            TWILIO_URL.format(sid=c.TWILIO_ACCOUNT_SID),
            auth=(c.TWILIO_ACCOUNT_SID, c.TWILIO_AUTH_TOKEN),
            data={"To": to, "From": c.TWILIO_FROM_NUMBER, "Body": body},
        )
        if resp.is_error:
            raise NotificationError("sms", f"{resp.status_code} {resp.text}")

    async def send_webhook(self, payload: dict) -> None:
        resp = await self.http.post(self.config.NOTIFY_WEBHOOK_URL, json=payload)
        if resp.is_error:
            raise NotificationError("webhook", f"{resp.status_code} {resp.text}")

    async def send_email(self, to: str, subject: str, html: str) -> None:
        resp = await self.http.post(
            RESEND_URL,
            headers={"Authorization": f"Bearer {self.config.RESEND_API_KEY}"},
            json={
                "from": self.config.EMAIL_FROM,
                "to": [to],
                "subject": subject,
                "html": html,
            },
        )
        if resp.is_error:
            raise NotificationError("email", f"{resp.status_code} {resp.text}")

    async def send_order_webhook(self, order: Order, user_message: str, admin_message: str) -> None:
        await self.send_webhook({
            "type": "order_created",
            "order": order.model_dump(mode="json", by_alias=True),
            "userMessage": user_message,
            "adminMessage": admin_message,
        })

    async def send_new_order_email(self, order: Order, to: str) -> None:
        subject = f"[클래스 신청] {order.name}님이 {format_schedule(order.schedule)} 클래스를 신청했습니다"
        await self.send_email(to, subject, self.render_email(order))

    # ==========================================================
    # РАССЫЛКА
    # ==========================================================
    async def notify(self, order: Order, email_settings: EmailSettings | None = None) -> None:
        """
        Запускает все настроенные каналы параллельно и ждёт, пока каждый
        завершится (успехом или ошибкой). Исключения наружу не выходят.
        """
        try:
            user_message, admin_message = self.build_messages(order)
        except Exception as e:
            await self.log.log_error("notify", f"Не удалось собрать тексты уведомлений: {e}", {"order_id": order.id})
            return

        # дальше всё, что может упасть, выполняется внутри корутин каналов
        tasks: list[tuple[str, object]] = []

        if self.has_twilio:
            tasks.append(("sms:customer", self.send_sms(order.phone, user_message)))
            if self.config.ADMIN_PHONE_NUMBER:
                tasks.append(("sms:admin", self.send_sms(self.config.ADMIN_PHONE_NUMBER, admin_message)))
        else:
            await self.log.log_debug("notify", "Twilio не настроен, SMS пропущены")

        if self.config.NOTIFY_WEBHOOK_URL:
            tasks.append(("webhook", self.send_order_webhook(order, user_message, admin_message)))

        if email_settings and email_settings.enabled and email_settings.admin_email:
            if self.config.RESEND_API_KEY:
                tasks.append(("email", self.send_new_order_email(order, email_settings.admin_email)))
            else:
                await self.log.log_debug("notify", "RESEND_API_KEY не задан, email пропущен")

        if not tasks:
            return

        channels = [name for name, _ in tasks]
        results = await asyncio.gather(*(coro for _, coro in tasks), return_exceptions=True)

        for channel, result in zip(channels, results):
            if isinstance(result, Exception):
                await self.log.log_error("notify", f"Канал {channel} не доставлен: {result}", {"order_id": order.id})
            else:
                await self.log.log_info("notify", f"Канал {channel} доставлен", {"order_id": order.id})
