class StorefrontError(Exception):
    """Base class for failures raised by storefront components."""


class IndexUnavailable(StorefrontError):
    """The catalog store could not be read."""


class CompletionFailed(StorefrontError):
    """The completion API call failed or returned an unusable response."""


class ValidationFailed(StorefrontError):
    """A record or input did not pass validation."""
