"""AMM error classes.

Every error aborts the transaction it is raised in. Each class carries a
short `reason` code, the string a caller sees when the call reverts.
"""


class AMMError(Exception):
    """Base error for AMM operations."""

    reason = "AMM_ERROR"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.reason)


# --- Input validation ---


class InputValidationError(AMMError):
    """Arguments are malformed regardless of chain state."""

    pass


class IdenticalAddressesError(InputValidationError):
    reason = "IDENTICAL_ADDRESSES"


class ZeroAddressError(InputValidationError):
    reason = "ZERO_ADDRESS"


class InvalidAddressError(InputValidationError):
    """Token identifier is not a 20-byte hex address."""

    reason = "INVALID_ADDRESS"


class InvalidPathError(InputValidationError):
    """Swap path has fewer than two tokens."""

    reason = "INVALID_PATH"


class ExpiredError(InputValidationError):
    """Deadline is earlier than the current block timestamp."""

    reason = "EXPIRED"


class InvalidToError(InputValidationError):
    """Swap recipient is one of the pair's own tokens."""

    reason = "INVALID_TO"


# --- State conflicts ---


class StateConflictError(AMMError):
    """Call conflicts with current registry or pair state."""

    pass


class PairExistsError(StateConflictError):
    reason = "PAIR_EXISTS"


class PairDoesNotExistError(StateConflictError):
    reason = "PAIR_DOES_NOT_EXIST"


class ForbiddenError(StateConflictError):
    """Caller is not allowed to perform this call."""

    reason = "FORBIDDEN"


class AlreadyInitializedError(StateConflictError):
    reason = "ALREADY_INITIALIZED"


class LockedError(StateConflictError):
    """Reentrant call into a pair that is already executing."""

    reason = "LOCKED"


# --- Economic / slippage guards ---


class SlippageError(AMMError):
    """Amounts fall outside the caller's bounds or the pool's capacity."""

    pass


class InsufficientAAmountError(SlippageError):
    reason = "INSUFFICIENT_A_AMOUNT"


class InsufficientBAmountError(SlippageError):
    reason = "INSUFFICIENT_B_AMOUNT"


class InsufficientAmountError(SlippageError):
    reason = "INSUFFICIENT_AMOUNT"


class InsufficientOutputAmountError(SlippageError):
    reason = "INSUFFICIENT_OUTPUT_AMOUNT"


class InsufficientInputAmountError(SlippageError):
    reason = "INSUFFICIENT_INPUT_AMOUNT"


class InsufficientLiquidityError(SlippageError):
    reason = "INSUFFICIENT_LIQUIDITY"


class InsufficientLiquidityMintedError(SlippageError):
    reason = "INSUFFICIENT_LIQUIDITY_MINTED"


class InsufficientLiquidityBurnedError(SlippageError):
    reason = "INSUFFICIENT_LIQUIDITY_BURNED"


class ExcessiveInputAmountError(SlippageError):
    reason = "EXCESSIVE_INPUT_AMOUNT"


# --- Integrity ---


class InvariantViolationError(AMMError):
    """Constant-product check failed after a swap."""

    reason = "K"


class ReserveOverflowError(AMMError):
    """A balance no longer fits in a uint112 reserve."""

    reason = "OVERFLOW"


# --- Token boundary ---


class TokenError(AMMError):
    """Base error raised by fungible ledgers."""

    pass


class InsufficientBalanceError(TokenError):
    reason = "INSUFFICIENT_BALANCE"


class InsufficientAllowanceError(TokenError):
    reason = "INSUFFICIENT_ALLOWANCE"


class TransferFailedError(TokenError):
    """Token reported failure instead of raising."""

    reason = "TRANSFER_FAILED"
