from __future__ import annotations


class AllowlistError(ValueError):
    """Base class for allow-list construction failures."""


class InvalidAddressError(AllowlistError):
    def __init__(self, value, reason: str = "not a valid account address", position=None):
        self.value = value
        self.reason = reason
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"invalid address{where}: {value!r} ({reason})")


class EmptyTreeError(AllowlistError):
    """Raised when a tree would be built from zero leaves."""


class LeafNotFoundError(AllowlistError, LookupError):
    """Raised by strict lookups when a leaf is not part of the tree."""


class ProofMismatchError(AllowlistError):
    """A proof or artifact did not recompute to the expected root."""
