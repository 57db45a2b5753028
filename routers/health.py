from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from schemas.ask import HealthResponse

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root():
    return "MIQ backend is running."


@router.get("/healthz", response_model=HealthResponse)
async def healthz():
    return HealthResponse(ok=True)
