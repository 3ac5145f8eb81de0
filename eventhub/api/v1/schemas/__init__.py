from eventhub.api.v1.schemas.discounts import (
    DiscountCreate,
    DiscountOut,
    DiscountUpdate,
    DiscountValidateIn,
    DiscountValidateOut,
)
from eventhub.api.v1.schemas.events import (
    DateFilter,
    EventCreate,
    EventDeletedOut,
    EventOut,
    EventUpdate,
    PriceIn,
    ScheduleItem,
)
from eventhub.api.v1.schemas.speakers import (
    InvitationCreate,
    InvitationOut,
    InvitationRespondIn,
    SpeakerOut,
    SpeakerRequestIn,
)
from eventhub.api.v1.schemas.tickets import (
    CheckInIn,
    EventStatisticsOut,
    EventStatisticsSummaryOut,
    EventTicketsOut,
    PurchaseIn,
    TicketOut,
)
from eventhub.api.v1.schemas.users import PublicProfileOut, UserOut, UserSummaryOut, UserUpdate

__all__ = [
    "DateFilter",
    "EventCreate",
    "EventUpdate",
    "EventOut",
    "EventDeletedOut",
    "PriceIn",
    "ScheduleItem",
    "PurchaseIn",
    "CheckInIn",
    "TicketOut",
    "EventTicketsOut",
    "EventStatisticsOut",
    "EventStatisticsSummaryOut",
    "DiscountCreate",
    "DiscountUpdate",
    "DiscountOut",
    "DiscountValidateIn",
    "DiscountValidateOut",
    "SpeakerRequestIn",
    "SpeakerOut",
    "InvitationCreate",
    "InvitationOut",
    "InvitationRespondIn",
    "UserOut",
    "UserSummaryOut",
    "PublicProfileOut",
    "UserUpdate",
]
