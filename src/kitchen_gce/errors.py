class KitchenGceError(Exception):
    """Base class for every error raised by the driver."""


class ConfigurationError(KitchenGceError, ValueError):
    """A required setting is missing or invalid. Raised before any API call."""


class CollaboratorError(KitchenGceError):
    """The Compute Engine API rejected a request."""


class ProvisioningTimeoutError(KitchenGceError, TimeoutError):
    """The instance never became reachable within the attempt bound."""
