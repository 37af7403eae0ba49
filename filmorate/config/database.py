from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator
import logging

from .settings import settings

logger = logging.getLogger(__name__)

# Параметры движка зависят от СУБД
if settings.DATABASE_URL.startswith("sqlite"):
    engine_options = {"connect_args": {"check_same_thread": False}}
else:
    engine_options = {
        "pool_pre_ping": True,
        "pool_size": 20,
        "max_overflow": 30,
        "pool_recycle": 3600,
    }

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    **engine_options
)

# Фабрика сессий
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Базовый класс для моделей
Base = declarative_base()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite не проверяет внешние ключи без явного PRAGMA."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency для получения сессии БД.
    Использовать в FastAPI зависимостях.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = engine) -> None:
    """
    Создание таблиц и заполнение справочников.

    Args:
        bind: Движок, на котором создаются таблицы
    """
    # Импорт моделей регистрирует таблицы в Base.metadata
    from filmorate.services.catalog_service import models as catalog_models  # noqa: F401
    from filmorate.services.film_service import models as film_models  # noqa: F401
    from filmorate.services.user_service import models as user_models  # noqa: F401
    from filmorate.services.catalog_service.storage import seed_catalogs

    Base.metadata.create_all(bind=bind)

    db = Session(bind=bind)
    try:
        seed_catalogs(db)
    finally:
        db.close()

    logger.info("Database initialized", extra={"url": str(bind.url)})
