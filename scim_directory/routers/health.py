"""Health check роутер"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_session

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(session: AsyncSession = Depends(get_session)) -> Dict[str, Any]:
    """Health check endpoint: сервис жив и база данных отвечает"""
    try:
        await session.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as error:
        logger.error(f"Database health check failed: {error}")
        database = "unavailable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "service": "scim-directory",
        "database": database,
    }
