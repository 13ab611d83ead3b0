"""SimpleDex error classes.

Every failure of a public engine operation is one of these. Operations are
atomic, so catching a DexError always means no engine state changed.
"""


class DexError(Exception):
    """Base error for engine operations."""

    default_message = "Operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def code(self) -> str:
        """Stable error identifier (the class name)."""
        return type(self).__name__

    @property
    def message(self) -> str:
        return str(self)


class IdenticalTokens(DexError):
    """Both sides of a pair are the same token."""

    default_message = "Tokens must be different"


class InvalidAmount(DexError):
    """Zero or otherwise out-of-range quantity."""

    default_message = "Amount must be greater than 0"


class InvalidInput(InvalidAmount):
    """Zero input passed to the output formula."""

    default_message = "Insufficient input amount"


class InsufficientLiquidity(DexError):
    """Withdrawal exceeds the tracked total, or pricing against an empty reserve."""

    default_message = "Insufficient liquidity"


class EmptyPool(DexError):
    """Pool has no reserves to withdraw from."""

    default_message = "Pool is empty"


class InsufficientOutput(DexError):
    """Computed swap output rounds down to zero."""

    default_message = "Insufficient output amount"


class PoolNotFound(DexError):
    """Price query against an uninitialized pool."""

    default_message = "Pool does not exist"


class AssetTransferFailed(DexError):
    """The asset ledger rejected a pull or a push."""

    default_message = "Token transfer failed"


__all__ = [
    "DexError",
    "IdenticalTokens",
    "InvalidAmount",
    "InvalidInput",
    "InsufficientLiquidity",
    "EmptyPool",
    "InsufficientOutput",
    "PoolNotFound",
    "AssetTransferFailed",
]
