"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Precondition violation (bad caller input, never clamped)
  2xxx: Liquidity (expected outcome, e.g. "reduce size")

InvariantViolationError is deliberately outside AppError: it signals a defect
in the engine itself and must never be handled as a normal outcome.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


# --- 1xxx: Precondition ---

class PreconditionError(AppError):
    def __init__(self, message: str, code: int = 1000) -> None:
        super().__init__(code, message)


class NegativeAmountError(PreconditionError):
    def __init__(self, name: str, value: int) -> None:
        super().__init__(f"{name} must be non-negative, got {value}", 1001)


class NonPositiveReserveError(PreconditionError):
    def __init__(self, name: str, value: int) -> None:
        super().__init__(f"{name} must be strictly positive, got {value}", 1002)


class InvalidTargetPriceError(PreconditionError):
    def __init__(self, price: int) -> None:
        super().__init__(f"Target price must be positive, got {price}", 1003)


class InvalidPercentageError(PreconditionError):
    def __init__(self, pct: int, max_pct: int) -> None:
        super().__init__(f"Percentage must be in (0, {max_pct}], got {pct}", 1004)


class InvalidOrderCountError(PreconditionError):
    def __init__(self, num_orders: int, num_top_of_book: int) -> None:
        super().__init__(
            f"num_orders ({num_orders}) must exceed the number of "
            f"top-of-book quote amounts ({num_top_of_book})",
            1005,
        )


class ZeroSpreadDivisorError(PreconditionError):
    def __init__(self, spread: int) -> None:
        super().__init__(
            f"Half spread {spread} exceeds spread precision; reserve offset undefined",
            1006,
        )


# --- 2xxx: Liquidity ---

class InsufficientLiquidityError(AppError):
    def __init__(self, requested: int, filled: int) -> None:
        self.requested = requested
        self.filled = filled
        super().__init__(
            2001,
            f"Insufficient liquidity: requested {requested}, "
            f"available {filled} across curve and resting orders",
        )


# --- Programming errors ---

class InvariantViolationError(AssertionError):
    """Internal consistency check failed. Never caught inside the engine."""
