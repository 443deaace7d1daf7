"""Domain-level exceptions for gadget module resolution."""


class BundleLookupError(Exception):
    """Raised when a bundle definition cannot be resolved."""

    def __init__(self, bundle_id: str, message: str | None = None) -> None:
        super().__init__(message or f"Bundle '{bundle_id}' could not be resolved")
        self.bundle_id = bundle_id


class BundleNotFoundError(BundleLookupError):
    """Raised when no bundle definition exists for the requested id."""

    def __init__(self, bundle_id: str) -> None:
        super().__init__(bundle_id, f"Bundle '{bundle_id}' not found")


class MalformedBundleError(BundleLookupError):
    """Raised when a bundle definition exists but cannot be parsed."""

    pass


class BackingStoreError(Exception):
    """Raised when a page store or review service is unreachable or failing."""

    def __init__(self, message: str, *, store: str | None = None, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.store = store
        self.cause = cause

    def __str__(self) -> str:
        if self.store is None:
            return self.message
        return f"{self.message} ({self.store})"
