"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Account
  3xxx: Order book
  4xxx: Settlement / transaction ledger
  5xxx: Request queues (deposits, verifications)
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Administrator role required", 403)


class SelfRevokeError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Administrators cannot revoke their own role", 422)


# --- 2xxx: Account ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required} cents, available {available} cents",
            422,
        )


class AccountNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"Account not found for user {user_id}", 404)


class InvalidProfileError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2003, f"Invalid profile: {detail}", 422)


class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2004, f"Invalid amount: {detail}", 422)


# --- 3xxx: Order book ---

class InvalidResourceError(AppError):
    def __init__(self, symbol: str) -> None:
        super().__init__(3001, f"Unknown resource symbol: {symbol}", 422)


class InvalidPriceError(AppError):
    def __init__(self, price: int) -> None:
        super().__init__(3002, f"Invalid unit price: {price} cents", 422)


class InvalidQuantityError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3003, f"Invalid quantity: {detail}", 422)


class OrderNotFoundError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(3004, f"Order not found: {order_id}", 404)


class OrderOwnershipError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(3005, f"Order {order_id} belongs to another account", 403)


# --- 4xxx: Settlement / transaction ledger ---

class SelfTradeError(AppError):
    def __init__(self) -> None:
        super().__init__(4001, "Cannot buy from your own order", 422)


class DuplicateTradeError(AppError):
    def __init__(self, idempotency_key: str) -> None:
        super().__init__(
            4002, f"Idempotency key reused with different parameters: {idempotency_key}", 409
        )


class TransactionNotFoundError(AppError):
    def __init__(self, trade_id: str) -> None:
        super().__init__(4003, f"Transaction not found: {trade_id}", 404)


class TransactionAccessDeniedError(AppError):
    def __init__(self, trade_id: str) -> None:
        super().__init__(4004, f"Not a party to transaction {trade_id}", 403)


# --- 5xxx: Request queues ---

class RequestNotFoundError(AppError):
    def __init__(self, kind: str, request_id: str) -> None:
        super().__init__(5001, f"{kind} request not found: {request_id}", 404)


class RequestAlreadyResolvedError(AppError):
    def __init__(self, request_id: str, status: str) -> None:
        super().__init__(5002, f"Request {request_id} is already {status}", 409)


class ProfileIncompleteError(AppError):
    def __init__(self) -> None:
        super().__init__(5003, "Profile must be complete before requesting verification", 422)


class VerificationPendingError(AppError):
    def __init__(self) -> None:
        super().__init__(5004, "A verification request is already pending", 409)


class VerificationCooldownError(AppError):
    def __init__(self, retry_at: str) -> None:
        self.retry_at = retry_at
        super().__init__(5005, f"Verification can be requested again after {retry_at}", 429)


class AlreadyVerifiedError(AppError):
    def __init__(self) -> None:
        super().__init__(5006, "Profile is already verified", 409)


class DuplicateDepositRequestError(AppError):
    def __init__(self, client_request_id: str) -> None:
        super().__init__(
            5007, f"Duplicate client_request_id with different parameters: {client_request_id}", 409
        )


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
