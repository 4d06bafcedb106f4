from fastapi import APIRouter
import logging

from . import albums, auth, health, photos


def build_router() -> APIRouter:
    router = APIRouter()
    log = logging.getLogger("routers")

    for name, module in (("auth", auth), ("albums", albums), ("photos", photos), ("health", health)):
        router.include_router(module.router)
        log.info("Loaded router: %s", name)

    return router


# Export module-level router so albumvault.main can import it
router = build_router()
