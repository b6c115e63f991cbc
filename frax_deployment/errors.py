class OrchestrationError(Exception):
    """Base class for every failure that terminates a deployment run."""


class DeploymentConfigError(ValueError):
    """Raised when a deployment parameter file is malformed or incomplete."""


class UnknownEnvironmentError(OrchestrationError, ValueError):
    """Raised when the selected environment is not supported."""


class MissingAddressError(OrchestrationError):
    """Raised when a component cannot be found in the loaded manifest."""

    def __init__(self, component: str, message: str):
        super().__init__(message)
        self.component = component


class TopologyError(OrchestrationError):
    """Raised when the dependency graph is invalid (e.g. contains a cycle)."""


class DeploymentError(OrchestrationError):
    """Raised when a component could not be instantiated."""

    def __init__(self, component: str, message: str):
        super().__init__(message)
        self.component = component


class WiringError(OrchestrationError):
    """Raised when a configuration transaction is rejected."""

    def __init__(self, transaction: str, message: str):
        super().__init__(message)
        self.transaction = transaction


class LedgerError(Exception):
    """Raised by a ledger when a deployment, transaction or call fails."""
