# classorder/routes/auth.py

from fastapi import APIRouter, Request, Response, status

from classorder.config import settings
from classorder.schemas.auth import LoginRequest
from classorder.schemas.base import OkResponse
from classorder.utils.errors import UnauthorizedError
from classorder.utils.security import (
    COOKIE_MAX_AGE,
    COOKIE_NAME,
    admin_token,
    is_admin_token_valid,
    verify_admin_password,
)

router = APIRouter()


async def require_admin(request: Request) -> None:
    """
    Зависимость для всех админских маршрутов: 401 до любого обращения к данным.
    """
    if not is_admin_token_valid(request.cookies.get(COOKIE_NAME)):
        await request.app.state.log.log_warning("auth", "Запрос без действующего admin cookie", {"path": request.url.path})
        raise UnauthorizedError()


def set_admin_cookie(response: Response) -> None:
    response.set_cookie(
        key=COOKIE_NAME,
        value=admin_token(),
        max_age=COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


def clear_admin_cookie(response: Response) -> None:
    response.set_cookie(
        key=COOKIE_NAME,
        value="",
        max_age=0,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


# ────────────── LOGIN ──────────────
@router.post(
    "/login",
    response_model=OkResponse,
    status_code=status.HTTP_200_OK,
    summary="Вход администратора",
    responses={
        200: {"description": "Пароль верный, cookie admin_auth установлен"},
        401: {"description": "Неверный пароль или ADMIN_PASSWORD не задан"},
    },
)
async def login(body: LoginRequest, request: Request, response: Response):
    log = request.app.state.log

    if not settings.ADMIN_PASSWORD:
        await log.log_error("auth", "ADMIN_PASSWORD не задан, вход невозможен")
        raise UnauthorizedError("Invalid password")

    if not verify_admin_password(body.password):
        await log.log_warning("auth", "Неудачная попытка входа")
        raise UnauthorizedError("Invalid password")

    set_admin_cookie(response)
    await log.log_info("auth", "Администратор вошёл")
    return OkResponse()


# ────────────── LOGOUT ──────────────
@router.post(
    "/logout",
    response_model=OkResponse,
    status_code=status.HTTP_200_OK,
    summary="Выход администратора",
)
async def logout(request: Request, response: Response):
    clear_admin_cookie(response)
    await request.app.state.log.log_info("auth", "Администратор вышел")
    return OkResponse()
