from collections.abc import Callable, Iterable
from pathlib import Path

from loguru import logger

from clinic.domain.dates import CalendarDate
from clinic.domain.exceptions import RosterFormatError
from clinic.domain.models import Doctor, Location, Profile, Specialty, Technician
from clinic.scheduling.store import AnyProvider

# Field positions after the kind marker.
_FIRST, _LAST, _DOB, _LOCATION = 0, 1, 2, 3


def _profile(fields: list[str]) -> Profile:
    try:
        dob = CalendarDate.parse(fields[_DOB])
    except ValueError as exc:
        raise RosterFormatError(f"malformed date of birth {fields[_DOB]!r}") from exc
    if not dob.is_valid():
        raise RosterFormatError(f"{fields[_DOB]} is not a valid calendar date")
    return Profile(first_name=fields[_FIRST], last_name=fields[_LAST], date_of_birth=dob)


def _location(fields: list[str]) -> Location:
    location = Location.lookup(fields[_LOCATION])
    if location is None:
        raise RosterFormatError(f"unknown location {fields[_LOCATION]!r}")
    return location


def _build_doctor(fields: list[str]) -> Doctor:
    if len(fields) != 6:
        raise RosterFormatError(f"doctor entries need 6 fields, got {len(fields)}")
    specialty = Specialty.lookup(fields[4])
    if specialty is None:
        raise RosterFormatError(f"unknown specialty {fields[4]!r}")
    return Doctor(
        profile=_profile(fields),
        location=_location(fields),
        specialty=specialty,
        npi=fields[5],
    )


def _build_technician(fields: list[str]) -> Technician:
    if len(fields) != 5:
        raise RosterFormatError(f"technician entries need 5 fields, got {len(fields)}")
    try:
        rate = int(fields[4])
    except ValueError as exc:
        raise RosterFormatError(f"rate {fields[4]!r} is not a whole number") from exc
    if rate < 0:
        raise RosterFormatError(f"rate {rate} is negative")
    return Technician(profile=_profile(fields), location=_location(fields), rate_per_visit=rate)


_BUILDERS: dict[str, Callable[[list[str]], AnyProvider]] = {
    "D": _build_doctor,
    "T": _build_technician,
}


def parse_provider(line: str, delimiter: str = "  ") -> AnyProvider:
    """Turn ``D  First  Last  M/D/YYYY  LOCATION  SPECIALTY  NPI`` or
    ``T  First  Last  M/D/YYYY  LOCATION  RATE`` into a provider."""
    parts = [part.strip() for part in line.strip().split(delimiter) if part.strip()]
    if not parts:
        raise RosterFormatError("empty entry")
    kind, *fields = parts
    builder = _BUILDERS.get(kind)
    if builder is None:
        raise RosterFormatError(f"unknown provider kind {kind!r}")
    return builder(fields)


def load_roster(lines: Iterable[str], delimiter: str = "  ") -> list[AnyProvider]:
    """Parse roster lines in order, skipping blanks.

    Raises:
        RosterFormatError: On the first bad line, or a repeated doctor NPI.
    """
    providers: list[AnyProvider] = []
    npis: set[str] = set()
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            provider = parse_provider(line, delimiter)
        except RosterFormatError as exc:
            raise RosterFormatError(exc.reason, line_number=line_number, line=line) from exc
        if isinstance(provider, Doctor):
            if provider.npi in npis:
                raise RosterFormatError(
                    f"duplicate NPI {provider.npi}", line_number=line_number, line=line
                )
            npis.add(provider.npi)
        providers.append(provider)

    logger.info("Loaded {} provider(s) from roster", len(providers))
    return providers


def load_roster_file(path: str | Path, delimiter: str = "  ") -> list[AnyProvider]:
    with open(path, encoding="utf-8") as handle:
        return load_roster(handle, delimiter)
