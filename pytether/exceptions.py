"""Exceptions raised by pytether."""


class PyTetherError(Exception):
    """Base class for pytether errors."""


class ConfigurationError(PyTetherError):
    """Required configuration is missing or invalid."""


class ArtifactError(PyTetherError):
    """A compiled contract artifact could not be loaded."""


class TransactionFailed(PyTetherError):
    """A transaction was mined but reverted."""

    def __init__(self, tx_hash: str, receipt=None):
        super().__init__(f"transaction {tx_hash} reverted")
        self.tx_hash = tx_hash
        self.receipt = receipt


class VerificationError(PyTetherError):
    """The block explorer rejected or failed a verification request."""
