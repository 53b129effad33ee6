from __future__ import annotations

from enum import StrEnum


class ParticipantRole(StrEnum):
    CUSTOMER = "customer"
    OPERATOR = "operator"


class Availability(StrEnum):
    AVAILABLE = "available"
    BUSY = "busy"


class SessionStatus(StrEnum):
    ACTIVE = "active"
    CLOSED = "closed"


class MenuKind(StrEnum):
    CUSTOMER = "customer"
    OPERATOR = "operator"
