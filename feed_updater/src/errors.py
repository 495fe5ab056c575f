"""Exceptions raised by the feed update workflow.

Every failure is fatal for the current run. The message of each exception is
prefixed with the step that failed so it can be logged as-is.
"""


class UpdateError(Exception):
    """Base exception for update workflow errors."""

    pass


class ConfigError(UpdateError):
    """Raised when process configuration is missing or invalid."""

    pass


class DeploymentError(UpdateError):
    """Raised when the deployment file is missing or lacks an entry."""

    pass


class CrossbarError(UpdateError):
    """Raised when fetching a quote from the Crossbar gateway fails.

    :ivar status_code: HTTP status code, if the gateway answered at all.
    """

    def __init__(self, message: str, status_code: int | None = None):
        """Initialize the gateway error.

        :param message: Error message.
        :param status_code: Optional HTTP status code.
        """
        self.status_code = status_code
        super().__init__(message)


class QuoteShapeError(CrossbarError):
    """Raised when a gateway response lacks a required field.

    :ivar field: Name of the missing or malformed field.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class InsufficientBalanceError(UpdateError):
    """Raised when the signer cannot pay the update fee.

    :ivar balance: Signer balance in wei.
    :ivar fee: Required fee in wei.
    """

    def __init__(self, balance: int, fee: int, message: str):
        self.balance = balance
        self.fee = fee
        super().__init__(message)


class TransactionRevertedError(UpdateError):
    """Raised when the update transaction was mined with a failure status."""

    def __init__(self, tx_hash: str, message: str):
        self.tx_hash = tx_hash
        super().__init__(message)
