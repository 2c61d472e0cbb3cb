from fastapi import APIRouter
from time import time

from app.schemas.contact import HealthOut

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthOut)
def health():
    return {"status": "ok", "timestamp": int(time() * 1000)}
