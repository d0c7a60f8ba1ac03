# classorder/routes/config.py

from fastapi import APIRouter, Depends, HTTPException, Request, status

from classorder.routes.auth import require_admin
from classorder.schemas.form_config import FormConfigRecord, FormConfigUpdate, PublicFormConfig
from classorder.services.form_config import (
    read_form_config_service,
    read_public_config_service,
    save_form_config_service,
)
from classorder.utils.errors import StoreError

router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(require_admin)])

# ────────────── READ (публично) ──────────────
@router.get(
    "",
    response_model=PublicFormConfig,
    status_code=status.HTTP_200_OK,
    summary="Конфигурация формы",
    response_description="Слоты с остатком мест, условия, реквизиты, цены",
)
async def read_config(request: Request):
    return await read_public_config_service(request)


# ────────────── UPSERT ──────────────
@router.put(
    "",
    response_model=FormConfigRecord,
    status_code=status.HTTP_200_OK,
    summary="Сохранить конфигурацию формы",
    responses={
        200: {"description": "Сохранённая конфигурация после нормализации"},
        401: {"description": "Нет действующего admin cookie"},
        500: {"description": "Ошибка хранилища"},
    },
)
async def save_config(
    body: FormConfigUpdate,
    request: Request,
    _: None = Depends(require_admin),
):
    try:
        return await save_form_config_service(body, request)
    except HTTPException:
        raise
    except Exception as e:
        await request.app.state.log.log_error("config", f"Ошибка при сохранении конфигурации: {e}")
        raise StoreError("Failed to save config")


# ────────────── READ (админка, с настройками почты) ──────────────
@admin_router.get(
    "",
    response_model=FormConfigRecord,
    status_code=status.HTTP_200_OK,
    summary="Полная конфигурация для админки",
    responses={401: {"description": "Нет действующего admin cookie"}},
)
async def read_admin_config(request: Request):
    return await read_form_config_service(request)
