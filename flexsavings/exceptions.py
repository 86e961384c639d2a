class FlexSavingsError(Exception): ...


class ValidationError(FlexSavingsError): ...


class IngestError(ValidationError): ...


class ScheduleError(FlexSavingsError): ...


def require(
    condition: bool, message: str, exc: type[FlexSavingsError] = FlexSavingsError
):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
