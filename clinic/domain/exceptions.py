class ClinicError(Exception):
    """Base exception for all clinic scheduling errors."""


class InvalidAppointmentError(ClinicError, ValueError):
    """Raised when the store is handed an appointment it cannot hold.

    Business-rule violations never reach the store; seeing this means the
    validation pipeline was bypassed.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid appointment: {reason}")


class RosterFormatError(ClinicError):
    """Raised when a provider roster line cannot be turned into a provider."""

    def __init__(self, reason: str, line_number: int | None = None, line: str | None = None) -> None:
        self.reason = reason
        self.line_number = line_number
        self.line = line
        where = f" (line {line_number})" if line_number is not None else ""
        super().__init__(f"Invalid roster entry{where}: {reason}")
