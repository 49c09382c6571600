from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import TextIO

from loguru import logger

from clinic.cli import reports
from clinic.scheduling.service import SchedulingService
from clinic.scheduling.store import AppointmentStore

INVALID_COMMAND = "Invalid command!"
QUIT_COMMAND = "Q"

Handler = Callable[[Sequence[str]], str]


class CommandRegistry:
    """Maps case-sensitive command verbs to handlers."""

    def __init__(self, handlers: Mapping[str, Handler]) -> None:
        self._handlers = dict(handlers)

    @classmethod
    def default(cls, store: AppointmentStore, service: SchedulingService) -> "CommandRegistry":
        return cls(
            {
                "D": service.schedule_office,
                "T": service.schedule_imaging,
                "C": service.cancel,
                "R": service.reschedule,
                "PA": lambda tokens: reports.appointments_by_date(store),
                "PP": lambda tokens: reports.appointments_by_patient(store),
                "PL": lambda tokens: reports.appointments_by_location(store),
                "PS": lambda tokens: reports.billing_statements(store),
                "PI": lambda tokens: reports.imaging_appointments(store),
                "PC": lambda tokens: reports.provider_credits(store),
                "PO": lambda tokens: reports.office_appointments(store),
            }
        )

    def execute(self, verb: str, tokens: Sequence[str]) -> str:
        handler = self._handlers.get(verb)
        if handler is None:
            logger.debug("Unknown command verb: {}", verb)
            return INVALID_COMMAND
        return handler(tokens)


def run_session(
    registry: CommandRegistry, lines: Iterable[str], output: TextIO, delimiter: str = ","
) -> None:
    """Execute one command per line until ``Q`` or end of input.

    Blank lines are ignored and empty tokens are dropped, so ``D,,x`` reads as
    ``D,x``.
    """
    for line in lines:
        line = line.strip()
        if not line:
            continue
        if line == QUIT_COMMAND:
            break
        parts = [token for token in line.split(delimiter) if token]
        if not parts:
            continue
        verb, *tokens = parts
        print(registry.execute(verb, tokens), file=output)
