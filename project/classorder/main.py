# classorder/main.py

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
import httpx
import uvicorn
from dotenv import load_dotenv
from contextlib import asynccontextmanager

from classorder.config import settings
from classorder.utils.log import Log
from classorder.utils.database import init_db, dispose_engine
from classorder.services.notification import NotificationDispatcher
from classorder.middleware.db_middleware import DBSessionMiddleware
from classorder.routes.auth import require_admin
from classorder.utils.errors import UnauthorizedError
from classorder.utils.security import COOKIE_NAME, is_admin_token_valid

import os
import multiprocessing

# --- загрузка переменных окружения ---
load_dotenv()

# --- sync логгер для раннего старта ---
boot_log = Log()
if os.environ.get("RUN_MAIN") == "true" or multiprocessing.current_process().name == "MainProcess":
    boot_log.log_info_sync(target="startup", message="Импорты main.py выполнены")

# ────────────── Lifespan ──────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.log = Log()
    log = app.state.log
    await log.log_info(target="startup", message="lifespan: startup начат")

    # Без хранилища сервис всё равно поднимается: /config отдаёт значения по умолчанию
    try:
        await init_db()
        await log.log_info(target="startup", message="База инициализирована")
    except Exception as e:
        await log.log_error(target="startup", message=f"База недоступна: {e}")

    app.state.http = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)
    app.state.notifier = NotificationDispatcher(app.state.http, log)
    await log.log_info(target="startup", message="Notifier добавлен в app.state", data={
        "sms": app.state.notifier.has_twilio,
        "webhook": bool(settings.NOTIFY_WEBHOOK_URL),
        "email": bool(settings.RESEND_API_KEY),
        "capacity_policy": settings.CAPACITY_POLICY,
    })

    yield

    # shutdown
    await log.log_info(target="shutdown", message="Остановка приложения")
    await app.state.http.aclose()
    await dispose_engine()
    await log.shutdown()
    boot_log.log_info_sync(target="shutdown", message="Log корректно завершён")

# ────────────── Создаём FastAPI приложение ──────────────
app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# DB middleware для request.state.db
app.add_middleware(DBSessionMiddleware)


def _requires_admin(request: Request) -> bool:
    endpoint = request.scope.get("endpoint")
    for route in request.app.routes:
        if isinstance(route, APIRoute) and route.endpoint is endpoint:
            return any(d.call is require_admin for d in route.dependant.dependencies)
    return False


# Ошибки разбора тела → 400, как и остальные ошибки валидации.
# Тело разбирается раньше зависимостей: админский маршрут без cookie всё равно 401
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    if _requires_admin(request) and not is_admin_token_valid(request.cookies.get(COOKIE_NAME)):
        await request.app.state.log.log_warning("auth", "Запрос без действующего admin cookie", {"path": request.url.path})
        exc_401 = UnauthorizedError()
        return JSONResponse(status_code=exc_401.status_code, content={"detail": exc_401.detail})

    await request.app.state.log.log_warning("request", "Некорректное тело запроса", {
        "path": request.url.path,
        "errors": [e.get("msg") for e in exc.errors()],
    })
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": "Invalid request body"})


@app.get("/health")
def health():
    return {"status": "ok"}

# ────────────── Подключение роутов ──────────────
from classorder.routes import auth, config, order, admin

app.include_router(order.router, prefix="/orders", tags=["orders"])
app.include_router(config.router, prefix="/config", tags=["config"])
app.include_router(auth.router, prefix="/admin", tags=["admin"])
app.include_router(admin.router, prefix="/admin/orders", tags=["admin"])
app.include_router(config.admin_router, prefix="/admin/config", tags=["admin"])

# ────────────── Запуск uvicorn ──────────────
if __name__ == "__main__":
    boot_log.log_info_sync(target="startup", message="Запуск uvicorn.run")
    uvicorn.run(
        "classorder.main:app",
        host="127.0.0.1",
        port=8000,
        log_level="info",
        reload=True
    )
