import asyncio
import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]


def ensure_dirs(upload_dir: str):
    path = Path(upload_dir)
    if not path.is_absolute():
        path = BACKEND_ROOT / path
    path.mkdir(parents=True, exist_ok=True)


async def recreate_db():
    # Ensure backend root on import path
    sys.path.insert(0, str(BACKEND_ROOT))
    from app.config import settings  # type: ignore

    db_path = Path(settings.DATABASE_PATH)
    if not db_path.is_absolute():
        db_path = BACKEND_ROOT / db_path
    if db_path.exists():
        db_path.unlink()

    from app.database import AsyncSessionLocal, create_tables  # type: ignore
    from app.services.bootstrap import bootstrap  # type: ignore
    await create_tables()
    async with AsyncSessionLocal() as session:
        await bootstrap(session)
    ensure_dirs(settings.UPLOAD_DIR)


if __name__ == '__main__':
    asyncio.run(recreate_db())
    print('Database recreated, roles and admin seeded, upload dir ensured.')
