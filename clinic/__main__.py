import sys

from loguru import logger

from clinic.cli import reports
from clinic.cli.registry import CommandRegistry, run_session
from clinic.cli.roster import load_roster_file
from clinic.config import ClinicConfig
from clinic.domain.dates import TimeslotGrid
from clinic.domain.exceptions import ClinicError
from clinic.scheduling.service import SchedulingService
from clinic.scheduling.store import AppointmentStore
from clinic.scheduling.validation import ScheduleValidator


def build_store(config: ClinicConfig) -> AppointmentStore:
    """Build the timeslot grid and load the provider roster."""
    grid = TimeslotGrid.build(
        config.timeslot_block_starts, config.slots_per_block, config.slot_minutes
    )
    providers = load_roster_file(config.roster_path, config.roster_delimiter)
    return AppointmentStore(grid, providers, date_qualified_rooms=config.date_qualified_rooms)


def main() -> int:
    config = ClinicConfig()
    logger.remove()
    logger.add(sys.stderr, level=config.log_level)

    try:
        store = build_store(config)
    except (ClinicError, OSError) as exc:
        logger.error("Could not load provider roster from {}: {}", config.roster_path, exc)
        return 1

    validator = ScheduleValidator(store, schedule_window_months=config.schedule_window_months)
    registry = CommandRegistry.default(store, SchedulingService(store, validator))

    print("Providers loaded to the list.")
    print(reports.providers_summary(store))
    print()
    print("Rotation list for the technicians.")
    print(reports.rotation_summary(store))
    print()
    print("Clinic Manager is running...")
    run_session(registry, sys.stdin, sys.stdout, config.command_delimiter)
    print("Clinic Manager terminated.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
