"""Exception types raised by y2m."""


class Y2MError(Exception):
    """Base class for all y2m errors."""
    pass


class ListingFetchError(Y2MError):
    """Raised when an organization's repository listing cannot be fetched.

    Covers transport failures, unexpected HTTP status codes and response
    bodies that do not decode into a repository list.
    """

    def __init__(self, organization: str, page: int, message: str):
        self.organization = organization
        self.page = page
        super().__init__(f"Failed to fetch {organization} repositories (page {page}): {message}")


class UnknownModuleError(Y2MError):
    """Raised when a module name matches no repository of any organization."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Module not found: {name}")


class ConfigError(Y2MError):
    """Raised when the user configuration file cannot be read or created."""
    pass
