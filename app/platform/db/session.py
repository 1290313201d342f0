from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.platform.config import settings

if settings.DATABASE_URL.startswith("sqlite"):
    # Local runs and tests: no pooling, every session opens its own connection
    engine = create_async_engine(settings.DATABASE_URL, echo=False, future=True, poolclass=NullPool)
else:
    engine = create_async_engine(
        settings.DATABASE_URL,
        echo=False,
        future=True,
        pool_pre_ping=True,
        pool_recycle=1800,
        pool_size=20,
        max_overflow=30,  # (burst capacity for concurrent suggestion saves)
        pool_timeout=30,
    )

SessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False, autocommit=False)
