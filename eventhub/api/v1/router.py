from fastapi import APIRouter

from eventhub.api.v1.attendance import router as attendance_router
from eventhub.api.v1.auth import router as auth_router
from eventhub.api.v1.discounts import router as discounts_router
from eventhub.api.v1.events import router as events_router
from eventhub.api.v1.speakers import router as speakers_router
from eventhub.api.v1.users import router as users_router

router = APIRouter()
router.include_router(auth_router)
# Static /events/... paths must be registered before /events/{event_id}
router.include_router(attendance_router)
router.include_router(speakers_router)
router.include_router(events_router)
router.include_router(users_router)
router.include_router(discounts_router)
