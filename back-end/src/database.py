from contextlib import asynccontextmanager
from pathlib import Path
import sys

from fastapi import FastAPI
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from config import get_settings
from models.relational_models import Template
from utilities.enumerables import TemplateCategory, TemplateLayout
from utilities.logger import setup_logger


settings = get_settings()

async_engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    future=True,
)


# Reference templates offered to every user. Ids come from the database
# sequence, so a fresh database numbers them in list order.
DEFAULT_TEMPLATES = [
    {
        "name": "Classic Professional",
        "category": TemplateCategory.PROFESSIONAL.value,
        "color": "#003366",
        "layout": TemplateLayout.STANDARD,
        "description": "Traditional and clean layout for corporate positions",
    },
    {
        "name": "Modern Executive",
        "category": TemplateCategory.PROFESSIONAL.value,
        "color": "#1a4d80",
        "layout": TemplateLayout.PROFESSIONAL,
        "description": "Contemporary design for senior leadership roles",
    },
    {
        "name": "Minimal Elegant",
        "category": TemplateCategory.MINIMALIST.value,
        "color": "#6c757d",
        "layout": TemplateLayout.SIMPLE,
        "description": "Understated and sophisticated for all industries",
    },
    {
        "name": "Creative Portfolio",
        "category": TemplateCategory.CREATIVE.value,
        "color": "#8e44ad",
        "layout": TemplateLayout.CREATIVE,
        "description": "Showcase your creative work and skills",
    },
    {
        "name": "Technical Specialist",
        "category": TemplateCategory.PROFESSIONAL.value,
        "color": "#2c3e50",
        "layout": TemplateLayout.STANDARD,
        "description": "Focused on technical skills and experience",
    },
    {
        "name": "Simple Graduate",
        "category": TemplateCategory.SIMPLE.value,
        "color": "#3498db",
        "layout": TemplateLayout.SIMPLE,
        "description": "Perfect for recent graduates or entry-level positions",
    },
    {
        "name": "Modern Digital",
        "category": TemplateCategory.MODERN.value,
        "color": "#16a085",
        "layout": TemplateLayout.MODERN,
        "description": "Contemporary style for digital professionals",
    },
    {
        "name": "Startup Innovator",
        "category": TemplateCategory.MODERN.value,
        "color": "#e74c3c",
        "layout": TemplateLayout.CREATIVE,
        "description": "Forward-thinking design for startup environments",
    },
]


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def seed_templates(session: AsyncSession) -> int:
    """
    Insert the reference templates when the template table is empty.

    Returns:
        int: number of templates inserted (0 when the table already had rows)
    """
    existing = (await session.exec(select(func.count()).select_from(Template))).one()
    if existing:
        logger.debug(f"Template table already holds {existing} rows, skipping seed")
        return 0

    try:
        session.add_all([Template(**data) for data in DEFAULT_TEMPLATES])
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(f"Seeded {len(DEFAULT_TEMPLATES)} reference templates")
    return len(DEFAULT_TEMPLATES)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Start-up: configure logging, create tables, seed templates and the avatar bucket.
    Shutdown: dispose of the engine's connection pool.
    """
    setup_logger(
        Path(settings.LOG_DIR),
        level=settings.LOG_LEVEL,
        extra_provenance={
            "App": settings.APP_NAME,
            "Environment": settings.ENVIRONMENT,
            "Database driver": async_engine.url.drivername,
        },
    )

    await init_db(async_engine)

    if settings.SEED_TEMPLATES:
        async with AsyncSession(async_engine) as session:
            await seed_templates(session)

    avatar_dir = Path(settings.UPLOAD_DIR) / settings.AVATAR_BUCKET
    avatar_dir.mkdir(parents=True, exist_ok=True)

    logger.info(f"{settings.APP_NAME} started (python {sys.version.split()[0]})")

    yield

    await async_engine.dispose()
    logger.info(f"{settings.APP_NAME} stopped")
