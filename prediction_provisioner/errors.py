from typing import Optional


class ProvisionerError(Exception):
    """Base class for every error raised by the provisioner."""


class PreconditionError(ProvisionerError):
    pass


class ConfigError(PreconditionError):
    pass


class ArtifactNotFoundError(PreconditionError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Contract artifact not found: {path}")


class NotOwnerError(PreconditionError):
    """Raised when the signing identity is not the contract's registered owner."""

    def __init__(self, actual: str, expected: str):
        self.actual = actual
        self.expected = expected
        super().__init__(f"Signer {actual} is not the contract owner (owner is {expected})")


class DeploymentError(ProvisionerError):
    pass


class ProvisionItemError(ProvisionerError):
    def __init__(self, index: int, message: str):
        self.index = index
        super().__init__(f"Event {index}: {message}")


class VerificationError(ProvisionerError):
    def __init__(self, query: str, message: str):
        self.query = query
        super().__init__(f"{query} failed: {message}")


class FatalError(ProvisionerError):
    pass


class EventSpecError(ProvisionerError, ValueError):
    pass


class RpcError(ProvisionerError):
    def __init__(self, message: str, code: Optional[int] = None):
        self.code = code
        super().__init__(message if code is None else f"[{code}] {message}")


class TransactionError(ProvisionerError):
    def __init__(self, tx_hash: str, message: str):
        self.tx_hash = tx_hash
        super().__init__(message)


class TransactionReverted(TransactionError):
    def __init__(self, tx_hash: str, block_number: Optional[int] = None):
        self.block_number = block_number
        super().__init__(tx_hash, f"Transaction {tx_hash} reverted")


class ConfirmationTimeout(TransactionError):
    def __init__(self, tx_hash: str, timeout: float):
        self.timeout = timeout
        super().__init__(tx_hash, f"Transaction {tx_hash} not confirmed within {timeout:g}s")
