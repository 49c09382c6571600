from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClinicConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CLINIC_", env_file=".env", extra="ignore")

    schedule_window_months: int = Field(default=6, ge=1)
    roster_path: str = "input/providers.txt"
    roster_delimiter: str = "  "
    command_delimiter: str = ","
    timeslot_block_starts: list[int] = Field(default_factory=lambda: [9, 14])
    slots_per_block: int = Field(default=6, ge=1)
    slot_minutes: int = Field(default=30, ge=1)
    # Rooms are booked per timeslot-of-day unless this is set.
    date_qualified_rooms: bool = False
    log_level: str = "INFO"
