# classorder/utils/database.py

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine, AsyncSession
from sqlalchemy.orm import declarative_base
from classorder.config import settings

# ────────────── Base для моделей ──────────────
Base = declarative_base()

# ────────────── Ленивый движок на всё время жизни процесса ──────────────
_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker | None = None


def normalize_async_url(url: str) -> str:
    """Приводит URL к async-драйверу (aiosqlite / asyncpg)."""
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


def get_engine() -> AsyncEngine:
    global _engine, _sessionmaker

    if _engine is None:
        if not settings.DATABASE_URL:
            raise RuntimeError("DATABASE_URL не задан")

        db_url = normalize_async_url(settings.DATABASE_URL)
        _engine = create_async_engine(db_url, echo=False, pool_pre_ping=True)

        if db_url.startswith("sqlite+aiosqlite://"):
            @event.listens_for(_engine.sync_engine, "connect")
            def _sqlite_pragmas(dbapi_connection, _):
                cur = dbapi_connection.cursor()
                cur.execute("PRAGMA busy_timeout=5000;")
                cur.close()

        _sessionmaker = async_sessionmaker(
            bind=_engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    return _engine


def get_sessionmaker() -> async_sessionmaker:
    get_engine()
    return _sessionmaker


# ────────────── Инициализация базы данных ──────────────
async def init_db():
    """
    Создаёт таблицы orders и form_config, если их ещё нет.
    Строку конфигурации не создаёт: при её отсутствии
    чтение отдаёт значения по умолчанию.
    """
    from classorder.models import order, form_config  # noqa: F401 регистрируем модели

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine():
    global _engine, _sessionmaker

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None
