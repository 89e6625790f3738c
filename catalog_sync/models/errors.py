# catalog_sync/models/errors.py

"""Error taxonomy shared by the client, the store and the view layer."""


class CatalogError(Exception):
    """Base class for every catalog_sync failure."""


class NetworkError(CatalogError):
    """Transport failure, non-2xx status, or an undecodable body."""

    def __init__(
        self, message: str, status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(CatalogError):
    """The backend answered 404 for ``path``."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Resource not found: {path}")
        self.path = path


class ValidationError(CatalogError):
    """Form input rejected before it reaches the store.

    ``errors`` maps a form field name to a human-readable message.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        summary = "; ".join(
            f"{name}: {msg}" for name, msg in errors.items()
        )
        super().__init__(summary or "Invalid input")
        self.errors = dict(errors)


class SagaError(CatalogError):
    """A multi-step remote operation failed part-way through.

    Compensations for the completed steps have already been attempted;
    ``compensation_failures`` lists the steps whose rollback also
    failed, which is when remote state is left inconsistent.
    """

    def __init__(
        self,
        saga_name: str,
        failed_step: str,
        cause: BaseException,
        compensation_failures: list[str] | None = None,
    ) -> None:
        self.saga_name = saga_name
        self.failed_step = failed_step
        self.cause = cause
        self.compensation_failures = list(compensation_failures or [])
        message = f"{saga_name} failed at '{failed_step}': {cause}"
        if self.compensation_failures:
            message += (
                " (rollback failed for: "
                + ", ".join(self.compensation_failures)
                + ")"
            )
        super().__init__(message)
