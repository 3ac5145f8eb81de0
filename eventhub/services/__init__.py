from eventhub.services.checkin_service import check_in, check_out
from eventhub.services.events_service import create_event, delete_event, update_event
from eventhub.services.tickets_service import purchase_paid, register_free, unregister

__all__ = [
    "create_event",
    "update_event",
    "delete_event",
    "register_free",
    "purchase_paid",
    "unregister",
    "check_in",
    "check_out",
]
