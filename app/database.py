from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool
from sqlalchemy import text
from app.config import settings
from app.migrations import run_migrations

DATABASE_URL = f"sqlite+aiosqlite:///{settings.DATABASE_PATH}"

# sqlite connections are cheap; a fresh one per checkout keeps them off stale event loops
engine = create_async_engine(DATABASE_URL, echo=settings.DATABASE_ECHO, poolclass=NullPool)
AsyncSessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
Base = declarative_base()

async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

def _import_models():
    # registers every table on Base.metadata
    import models.role  # noqa: F401
    import models.auth  # noqa: F401
    import models.user  # noqa: F401
    import models.post  # noqa: F401
    import models.reset_token  # noqa: F401

async def create_tables():
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await run_migrations(conn)

async def drop_tables():
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.execute(text("DROP TABLE IF EXISTS schema_migrations"))
