from sqlalchemy.ext.asyncio import create_async_engine

from evalo.core.config import get_settings

settings = get_settings()

# Async engine; SQLAlchemy picks AsyncAdaptedQueuePool for it
engine = create_async_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    echo=False,
)
