"""Global enums: values must match DB CHECK constraints exactly."""

from enum import Enum


class TransactionType(str, Enum):
    SEND = "send"
    RECEIVE = "receive"
    REQUEST = "request"
    LOCK = "lock"
    PENALTY = "penalty"
    FEE = "fee"


class TransactionStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"
    RETURNED = "Returned"
    LOCKED = "Locked"
    DECLINED = "Declined"


class LockedSavingStatus(str, Enum):
    PENDING = "Pending"
    LOCKED = "Locked"
    WITHDRAWN = "Withdrawn"
    FAILED = "Failed"


class FenceKind(str, Enum):
    CIRCLE = "circle"
    POLYGON = "polygon"
