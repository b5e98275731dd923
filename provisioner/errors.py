from typing import Optional


class ProvisionerError(Exception):
    """Base class for provisioner failures."""


class InvalidTenantID(ProvisionerError):
    def __init__(self, tenant_id=None):
        self.tenant_id = tenant_id
        super().__init__("invalid tenant ID: must be a valid UUID")


class StoreError(ProvisionerError):
    """A call to the cluster API failed or could not be made."""

    def __init__(self, operation: str, reason: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.reason = reason
        self.cause = cause
        super().__init__(f"{operation}: {reason}")


class RandomSourceError(StoreError):
    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__("generating random bytes", "secure random source unavailable", cause)


class UnsupportedOperation(ProvisionerError):
    def __init__(self, operation: str, hint: str):
        self.operation = operation
        self.hint = hint
        super().__init__(f"{operation} not supported, {hint}")


class ConfigurationError(ProvisionerError):
    """Static configuration is unusable. Only raised at startup."""


class CredentialsUnavailable(Exception):
    """A credential source has nothing to offer; the next one is tried."""
