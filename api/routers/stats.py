"""
Stats Router

GET /api/v1/stats - Public impact numbers for the landing page
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.responses import envelope
from database.db import get_db
from services import stats_service

router = APIRouter(prefix="/api/v1/stats", tags=["Stats"])


@router.get("")
@router.get("/", include_in_schema=False)
def impact_stats(db: Session = Depends(get_db)):
    return envelope("Impact stats retrieved successfully", stats_service.get_impact_stats(db))
