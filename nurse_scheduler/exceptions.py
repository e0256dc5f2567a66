class ScheduleInputError(ValueError):
    """Raised when roster, settings or month are malformed, before any pass runs."""

    pass


class ConfigurationError(ValueError):
    """Raised when scheduler configuration cannot be loaded or converted."""

    pass
