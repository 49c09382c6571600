from enum import Enum
from functools import total_ordering
from typing import Annotated, Literal, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from clinic.domain.dates import CalendarDate, Timeslot
from clinic.formatting import format_currency, time_to_12h


class Location(Enum):
    """Clinic sites. The county groups location-based reports."""

    BRIDGEWATER = ("Somerset", "08807")
    EDISON = ("Middlesex", "08817")
    PISCATAWAY = ("Middlesex", "08854")
    PRINCETON = ("Mercer", "08542")
    MORRISTOWN = ("Morris", "07960")
    CLARK = ("Union", "07066")

    def __init__(self, county: str, zip_code: str) -> None:
        self.county = county
        self.zip_code = zip_code

    @classmethod
    def lookup(cls, name: str) -> "Location | None":
        return cls.__members__.get(name.upper())

    def __str__(self) -> str:
        return f"{self.name}, {self.county} {self.zip_code}"


class Specialty(Enum):
    """Doctor specialties, valued at their per-visit charge."""

    FAMILY = 250
    PEDIATRICIAN = 300
    ALLERGIST = 350

    @property
    def charge(self) -> int:
        return self.value

    @classmethod
    def lookup(cls, name: str) -> "Specialty | None":
        return cls.__members__.get(name.upper())


class Radiology(str, Enum):
    """Imaging services, one room of each kind per location."""

    CATSCAN = "CATSCAN"
    ULTRASOUND = "ULTRASOUND"
    XRAY = "XRAY"

    @classmethod
    def lookup(cls, name: str) -> "Radiology | None":
        return cls.__members__.get(name.upper())


@total_ordering
class Profile(BaseModel):
    """Identity shared by patients and providers."""

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    date_of_birth: CalendarDate

    @classmethod
    def from_tokens(cls, first_name: str, last_name: str, dob_token: str) -> "Profile":
        """Build a profile from raw tokens; the dob is parsed but not range-checked."""
        return cls(
            first_name=first_name,
            last_name=last_name,
            date_of_birth=CalendarDate.parse(dob_token),
        )

    def compare(self, other: "Profile") -> int:
        """Order by last name, first name, then date of birth, as -1/0/1."""
        for mine, theirs in (
            (self.last_name, other.last_name),
            (self.first_name, other.first_name),
        ):
            if mine != theirs:
                return -1 if mine < theirs else 1
        if self.date_of_birth == other.date_of_birth:
            return 0
        return -1 if self.date_of_birth < other.date_of_birth else 1

    def matches(self, other: "Profile") -> bool:
        """Case-insensitive name match with an exact date of birth."""
        return (
            self.first_name.lower() == other.first_name.lower()
            and self.last_name.lower() == other.last_name.lower()
            and self.date_of_birth == other.date_of_birth
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Profile):
            return NotImplemented
        return self.compare(other) < 0

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name} {self.date_of_birth}"


@runtime_checkable
class ProviderLike(Protocol):
    """Capabilities every provider variant exposes."""

    @property
    def profile(self) -> Profile: ...

    @property
    def location(self) -> Location: ...

    def rate(self) -> int:
        """Charge for a single visit, in whole dollars."""
        ...


class Doctor(BaseModel):
    """Sees patients for office visits, billed by specialty."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["doctor"] = "doctor"
    profile: Profile
    location: Location
    specialty: Specialty
    npi: str

    def rate(self) -> int:
        return self.specialty.charge

    def __str__(self) -> str:
        return f"[{self.profile}, {self.location}][{self.specialty.name}, #{self.npi}]"


class Technician(BaseModel):
    """Runs imaging rooms at a location for a flat rate per visit."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["technician"] = "technician"
    profile: Profile
    location: Location
    rate_per_visit: int = Field(ge=0)

    def rate(self) -> int:
        return self.rate_per_visit

    def brief(self) -> str:
        return f"{self.profile.first_name} {self.profile.last_name} ({self.location.name})"

    def __str__(self) -> str:
        return f"[{self.profile}, {self.location}][rate: {format_currency(self.rate_per_visit)}]"


Provider = Annotated[Union[Doctor, Technician], Field(discriminator="kind")]


class OfficeAppointment(BaseModel):
    """A doctor visit."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["office"] = "office"
    date: CalendarDate
    timeslot: Timeslot
    patient: Profile
    provider: Doctor

    def conflicts(self, date: CalendarDate, timeslot: Timeslot) -> bool:
        return self.date == date and self.timeslot == timeslot

    def __str__(self) -> str:
        return f"{self.date} {time_to_12h(self.timeslot)} {self.patient} {self.provider}"


class ImagingAppointment(BaseModel):
    """A radiology visit with a technician in a specific room."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["imaging"] = "imaging"
    date: CalendarDate
    timeslot: Timeslot
    patient: Profile
    provider: Technician
    room: Radiology

    def conflicts(self, date: CalendarDate, timeslot: Timeslot) -> bool:
        return self.date == date and self.timeslot == timeslot

    def __str__(self) -> str:
        return (
            f"{self.date} {time_to_12h(self.timeslot)} {self.patient} {self.provider}"
            f"[{self.room.value}]"
        )


Appointment = Annotated[Union[OfficeAppointment, ImagingAppointment], Field(discriminator="kind")]


class Visit(BaseModel):
    """A finalised appointment and the charge it produced."""

    model_config = ConfigDict(frozen=True)

    appointment: Appointment
    charge: int


class Patient(BaseModel):
    """A patient record with its billed visit history."""

    profile: Profile
    visits: list[Visit] = Field(default_factory=list)

    def add_visit(self, appointment: OfficeAppointment | ImagingAppointment) -> Visit:
        visit = Visit(appointment=appointment, charge=appointment.provider.rate())
        self.visits.append(visit)
        return visit

    def charge(self) -> int:
        return sum(visit.charge for visit in self.visits)

    def __str__(self) -> str:
        return str(self.profile)
