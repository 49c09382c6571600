import pytest

from clinic.domain.dates import CalendarDate, TimeslotGrid
from clinic.domain.models import Doctor, Location, Profile, Specialty, Technician
from clinic.scheduling.service import SchedulingService
from clinic.scheduling.store import AnyProvider, AppointmentStore
from clinic.scheduling.validation import ScheduleValidator


@pytest.fixture
def today() -> CalendarDate:
    """A Monday; the six-month horizon falls on 7/15/2024."""
    return CalendarDate(year=2024, month=1, day=15)


@pytest.fixture
def grid() -> TimeslotGrid:
    return TimeslotGrid.build([9, 14], slots_per_block=6, slot_minutes=30)


@pytest.fixture
def roster() -> list[AnyProvider]:
    """Doctors and technicians interleaved, so rotation has to skip doctors."""
    return [
        Doctor(
            profile=Profile.from_tokens("Andrew", "Patel", "1/21/1989"),
            location=Location.EDISON,
            specialty=Specialty.FAMILY,
            npi="01",
        ),
        Technician(
            profile=Profile.from_tokens("Frank", "Lin", "5/23/1989"),
            location=Location.EDISON,
            rate_per_visit=100,
        ),
        Doctor(
            profile=Profile.from_tokens("Rachael", "Lim", "11/23/1981"),
            location=Location.PRINCETON,
            specialty=Specialty.PEDIATRICIAN,
            npi="02",
        ),
        Technician(
            profile=Profile.from_tokens("Ben", "Jerry", "10/9/1979"),
            location=Location.PRINCETON,
            rate_per_visit=90,
        ),
        Technician(
            profile=Profile.from_tokens("Chloe", "Wang", "7/1/1987"),
            location=Location.CLARK,
            rate_per_visit=150,
        ),
        Doctor(
            profile=Profile.from_tokens("Tom", "Kaur", "4/12/1993"),
            location=Location.BRIDGEWATER,
            specialty=Specialty.ALLERGIST,
            npi="123",
        ),
    ]


@pytest.fixture
def store(grid: TimeslotGrid, roster: list[AnyProvider]) -> AppointmentStore:
    return AppointmentStore(grid, roster)


@pytest.fixture
def validator(store: AppointmentStore, today: CalendarDate) -> ScheduleValidator:
    return ScheduleValidator(store, clock=lambda: today)


@pytest.fixture
def service(store: AppointmentStore, validator: ScheduleValidator) -> SchedulingService:
    return SchedulingService(store, validator)
