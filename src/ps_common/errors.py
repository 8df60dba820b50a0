"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth
  2xxx: Account
  3xxx: Prediction
  4xxx: Stake
  5xxx: Settlement / payout
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


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired access token", 401)


# --- 2xxx: Account ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


class AccountNotFoundError(AppError):
    def __init__(self, identity: str) -> None:
        super().__init__(2002, f"Account not found for {identity}", 404)


class BalanceLimitError(AppError):
    def __init__(self, identity: str, amount: int) -> None:
        super().__init__(
            2003, f"Crediting {amount} would exceed the balance limit for {identity}", 422
        )


# --- 3xxx: Prediction ---

class InvalidPredictionError(AppError):
    def __init__(self, prediction_id: int) -> None:
        super().__init__(3001, f"Prediction not found: {prediction_id}", 404)


class AlreadyResolvedError(AppError):
    def __init__(self, prediction_id: int) -> None:
        super().__init__(3002, f"Prediction already resolved: {prediction_id}", 409)


class UnauthorizedResolverError(AppError):
    def __init__(self, prediction_id: int) -> None:
        super().__init__(
            3003, f"Only the creator can resolve prediction {prediction_id}", 403
        )


class InvalidPredictionTextError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3004, f"Invalid prediction text: {detail}", 422)


# --- 4xxx: Stake ---

class ZeroAmountError(AppError):
    def __init__(self, amount: int) -> None:
        super().__init__(4001, f"Stake amount must be positive, got {amount}", 422)


# --- 5xxx: Settlement ---

class TransferFailureError(AppError):
    def __init__(self, depositor: str, reason: str) -> None:
        self.depositor = depositor
        self.reason = reason
        super().__init__(5001, f"Payout to {depositor} failed: {reason}", 502)


class NothingToClaimError(AppError):
    def __init__(self, prediction_id: int, depositor: str) -> None:
        super().__init__(
            5002, f"No winning stake for {depositor} on prediction {prediction_id}", 404
        )


class PayoutAlreadyClaimedError(AppError):
    def __init__(self, prediction_id: int, depositor: str) -> None:
        super().__init__(
            5003, f"Payout already claimed by {depositor} on prediction {prediction_id}", 409
        )


class PredictionNotResolvedError(AppError):
    def __init__(self, prediction_id: int) -> None:
        super().__init__(5004, f"Prediction is not resolved yet: {prediction_id}", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
