import time

from fastapi import APIRouter, Request
from tortoise import connections
from tortoise.exceptions import BaseORMException

router = APIRouter(prefix="/ops", tags=["ops"])

startup_time = time.time()


@router.get("/db-health")
async def db_health():
    """Round-trip a trivial query on the default connection."""
    try:
        await connections.get("default").execute_query("SELECT 1")
    except (BaseORMException, OSError) as e:
        return {"db_ok": False, "error": str(e)}
    return {"db_ok": True, "uptime_seconds": round(time.time() - startup_time, 2)}


@router.get("/routes")
async def list_routes(request: Request):
    routes = []
    for r in request.app.routes:
        routes.append({
            "path": getattr(r, "path", ""),
            "methods": sorted(getattr(r, "methods", None) or []),
            "name": getattr(r, "name", ""),
        })
    return {"count": len(routes), "routes": routes}
