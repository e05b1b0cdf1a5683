from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter()


@router.get("")
def health_root():
    return {"status": "ok", "ts": datetime.now(timezone.utc).isoformat()}
