from fastapi import APIRouter

from photoweb.models.demo import DEMO_RECORD, DemoRecord

router = APIRouter(tags=["demo"])


@router.get("/json", response_model=DemoRecord)
async def demo_record() -> DemoRecord:
    return DEMO_RECORD
