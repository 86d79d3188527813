from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from catalog.core.config import settings

# Postgres cancels statements that run past db_statement_timeout_ms.
engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
    connect_args={
        "server_settings": {
            "application_name": "shoe-catalog",
            "statement_timeout": str(settings.db_statement_timeout_ms),
        },
    },
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
