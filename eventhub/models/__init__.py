from eventhub.models.base import Base
from eventhub.models.discount_code import DiscountCode
from eventhub.models.event import Event
from eventhub.models.speaker_invitation import SpeakerInvitation
from eventhub.models.ticket import Ticket
from eventhub.models.user import User

__all__ = ["Base", "User", "Event", "Ticket", "DiscountCode", "SpeakerInvitation"]
