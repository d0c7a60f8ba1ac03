# classorder/middleware/db_middleware.py

from classorder.utils.database import get_sessionmaker

class DBSessionMiddleware:
    """
    Кладёт AsyncSession в request.state.db на время запроса.
    Если хранилище не настроено, кладёт None: сервисы сами решают,
    отдать значения по умолчанию или ответить 500.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        state = scope.setdefault("state", {})
        try:
            state["db"] = get_sessionmaker()()
        except RuntimeError:
            state["db"] = None

        try:
            await self.app(scope, receive, send)
        finally:
            # закрываем сессию только после завершения запроса
            if state["db"] is not None:
                await state["db"].close()
