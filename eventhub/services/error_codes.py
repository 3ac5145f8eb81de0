from enum import Enum


class ErrorCode(str, Enum):
    USER_NOT_FOUND = "USER_NOT_FOUND"
    EMAIL_IN_USE = "EMAIL_IN_USE"

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    NOT_EVENT_ORGANIZER = "NOT_EVENT_ORGANIZER"
    INVALID_ROOM_NUMBER = "INVALID_ROOM_NUMBER"
    INVALID_TIME_RANGE = "INVALID_TIME_RANGE"
    INVALID_PRICE = "INVALID_PRICE"
    ROOM_UNAVAILABLE = "ROOM_UNAVAILABLE"
    EVENT_ENDED = "EVENT_ENDED"
    EVENT_NOT_ACTIVE = "EVENT_NOT_ACTIVE"
    CAPACITY_BELOW_TICKETS = "CAPACITY_BELOW_TICKETS"

    EVENT_NOT_FREE = "EVENT_NOT_FREE"
    EVENT_NOT_PAID = "EVENT_NOT_PAID"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    EVENT_FULL = "EVENT_FULL"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    NOT_CHECKED_IN = "NOT_CHECKED_IN"

    DISCOUNT_NOT_FOUND = "DISCOUNT_NOT_FOUND"
    DISCOUNT_EXPIRED = "DISCOUNT_EXPIRED"
    DISCOUNT_LIMIT_REACHED = "DISCOUNT_LIMIT_REACHED"
    DISCOUNT_CODE_EXISTS = "DISCOUNT_CODE_EXISTS"
    INVALID_DISCOUNT = "INVALID_DISCOUNT"

    SPEAKER_ALREADY_APPROVED = "SPEAKER_ALREADY_APPROVED"
    SPEAKER_REQUEST_PENDING = "SPEAKER_REQUEST_PENDING"
    SPEAKER_ALREADY_REJECTED = "SPEAKER_ALREADY_REJECTED"
    SPEAKER_NOT_APPROVED = "SPEAKER_NOT_APPROVED"
    INVALID_SPEAKER_REQUEST = "INVALID_SPEAKER_REQUEST"
    INVITATION_NOT_FOUND = "INVITATION_NOT_FOUND"
    INVITATION_EXISTS = "INVITATION_EXISTS"
    INVITATION_NOT_PENDING = "INVITATION_NOT_PENDING"
    NOT_INVITED_SPEAKER = "NOT_INVITED_SPEAKER"
    INVALID_INVITATION_ACTION = "INVALID_INVITATION_ACTION"

    FORBIDDEN = "FORBIDDEN"
