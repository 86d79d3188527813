from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.api.dependencies.database import get_db
from catalog.services.health_service import get_health

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    body, status_code = await get_health(db)
    return JSONResponse(content=body, status_code=status_code)
