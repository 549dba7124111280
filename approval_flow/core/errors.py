class FlowError(ValueError):
    """Base class for approval flow failures reported back to the caller."""


class InvalidStateError(FlowError):
    pass


class AlreadyProcessedError(FlowError):
    pass


class ForbiddenError(FlowError):
    pass


class ConflictError(FlowError):
    pass


class NotFoundError(FlowError):
    pass


class InvalidFlowError(FlowError):
    pass


_HTTP_STATUS = (
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (ConflictError, 409),
)


def http_status(exc: Exception) -> int:
    for error_type, status_code in _HTTP_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 400
