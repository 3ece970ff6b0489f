"""Unified error codes and custom exceptions.

Every error carries a numeric code, a stable ``kind`` string that clients
branch on, and a human-readable message.

Error code ranges:
  1xxx: Auth/User
  2xxx: Ledger/Account
  3xxx: Geo (fence / location)
  4xxx: Transfer
  5xxx: Locked savings
  6xxx: Payment provider
  9xxx: System / validation
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        kind: str = "INTERNAL_ERROR",
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.kind = kind
        super().__init__(message)


# --- 1xxx: Auth/User ---

class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "A user with this email already exists", 409, "EMAIL_EXISTS")


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid email or password", 401, "INVALID_CREDENTIALS")


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "User is disabled", 403, "USER_DISABLED")


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(
            1005, "Refresh token is invalid or expired", 401, "INVALID_REFRESH_TOKEN"
        )


class NotAuthorizedError(AppError):
    """Caller is authenticated but is not the counterparty allowed to act."""

    def __init__(self, detail: str) -> None:
        super().__init__(1006, f"Not authorized: {detail}", 403, "NOT_AUTHORIZED")


# --- 2xxx: Ledger/Account ---

class InsufficientFundsError(AppError):
    def __init__(self, required: int, available: int | None) -> None:
        shown = "unknown" if available is None else f"{available} cents"
        super().__init__(
            2001,
            f"Insufficient funds: required {required} cents, available {shown}",
            422,
            "INSUFFICIENT_FUNDS",
        )
        self.required = required
        self.available = available


class AccountNotFoundError(AppError):
    def __init__(self, account_id: str) -> None:
        super().__init__(2002, f"Account not found: {account_id}", 404, "INVALID_ACCOUNT")


class AccountHasActiveSavingsError(AppError):
    def __init__(self, account_id: str, active: int) -> None:
        super().__init__(
            2003,
            f"Account {account_id} has {active} locked saving(s) not yet withdrawn",
            409,
            "ACCOUNT_HAS_ACTIVE_SAVINGS",
        )


class BalanceUnavailableError(AppError):
    """Balance feed temporarily unavailable; the only retryable feed error."""

    def __init__(self, detail: str) -> None:
        super().__init__(2004, f"Balance unavailable: {detail}", 503, "BALANCE_UNAVAILABLE")


# --- 3xxx: Geo ---

class ConfigurationError(AppError):
    """Malformed fence definition, or a required collaborator is not configured."""

    def __init__(self, detail: str) -> None:
        super().__init__(3001, f"Configuration error: {detail}", 500, "CONFIGURATION_ERROR")


class LocationRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(
            3002, "Location required to claim this transfer", 422, "LOCATION_REQUIRED"
        )


class OutsideFenceError(AppError):
    def __init__(self, location_name: str) -> None:
        where = location_name or "the required area"
        super().__init__(
            3003, f"You must be within {where} to claim this transfer", 422, "OUTSIDE_FENCE"
        )


# --- 4xxx: Transfer ---

class TransactionNotFoundError(AppError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(4001, f"Transaction not found: {transaction_id}", 404, "NOT_FOUND")


class NotClaimableError(AppError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(
            4002, f"Transaction {transaction_id} is not claimable", 409, "NOT_CLAIMABLE"
        )


class ExpiredError(AppError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(
            4003, f"Transaction {transaction_id} has expired and was returned", 410, "EXPIRED"
        )


class TransactionNotPendingError(AppError):
    def __init__(self, transaction_id: str, status: str) -> None:
        super().__init__(
            4004, f"Transaction {transaction_id} is {status}, not Pending", 409, "NOT_PENDING"
        )


# --- 5xxx: Locked savings ---

class InvalidPeriodError(AppError):
    def __init__(self, months: int, allowed: tuple[int, ...]) -> None:
        super().__init__(
            5001,
            f"Lock period {months} months not allowed; choose one of {list(allowed)}",
            422,
            "INVALID_PERIOD",
        )


class LockedSavingNotFoundError(AppError):
    def __init__(self, locked_saving_id: str) -> None:
        super().__init__(5002, f"Locked saving not found: {locked_saving_id}", 404, "NOT_FOUND")


class NotWithdrawableError(AppError):
    def __init__(self, locked_saving_id: str, status: str) -> None:
        super().__init__(
            5003,
            f"Locked saving {locked_saving_id} is {status} and cannot be withdrawn",
            409,
            "NOT_WITHDRAWABLE",
        )


class LockNotPendingError(AppError):
    def __init__(self, locked_saving_id: str, status: str) -> None:
        super().__init__(
            5004,
            f"Locked saving {locked_saving_id} is {status}, not Pending",
            409,
            "NOT_PENDING",
        )


# --- 6xxx: Payment provider ---

class ProviderError(AppError):
    """External payment rail failed; local state is unchanged and retry is safe."""

    def __init__(self, detail: str) -> None:
        super().__init__(6001, f"Payment provider error: {detail}", 502, "PROVIDER_ERROR")


# --- 9xxx: System ---

class InvalidInputError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9001, f"Invalid input: {detail}", 422, "INVALID_INPUT")


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500, "INTERNAL_ERROR")


class InvariantViolationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9003, f"Invariant violated: {detail}", 500, "INVARIANT_VIOLATION")
