from collections.abc import Callable, Iterable
from typing import Any, cast

from loguru import logger

from clinic.domain.dates import CalendarDate, Timeslot, TimeslotGrid
from clinic.domain.exceptions import InvalidAppointmentError
from clinic.domain.models import (
    Doctor,
    ImagingAppointment,
    Location,
    OfficeAppointment,
    Patient,
    Profile,
    Radiology,
    Technician,
)

AnyAppointment = OfficeAppointment | ImagingAppointment
AnyProvider = Doctor | Technician


class AppointmentStore:
    """In-memory owner of the clinic's appointments, patients and providers.

    The store never checks for conflicts on insert; callers run the
    validation pipeline first. Lookups return ``None`` or empty lists instead
    of raising, and every collection accessor returns a snapshot.

    Technicians are assigned round-robin. The rotation cursor indexes the
    provider roster and walks it in reverse, wrapping at the front. It
    persists across bookings, so load visibly rotates between technicians.
    """

    def __init__(
        self,
        timeslots: TimeslotGrid | None = None,
        providers: Iterable[AnyProvider] = (),
        *,
        rotation_index: int = 0,
        date_qualified_rooms: bool = False,
    ) -> None:
        self.timeslots = timeslots if timeslots is not None else TimeslotGrid()
        self._providers: list[AnyProvider] = list(providers)
        self._patients: dict[Profile, Patient] = {}
        self._appointments: list[AnyAppointment] = []
        self._rotation_index = rotation_index
        self._date_qualified_rooms = date_qualified_rooms

    def add_appointment(self, appointment: AnyAppointment | None) -> None:
        if appointment is None:
            raise InvalidAppointmentError("appointment is required")
        self._appointments.append(appointment)
        logger.info("Appointment added: {}", appointment)

    def remove_appointment(self, appointment: AnyAppointment | None) -> None:
        if appointment is None or appointment not in self._appointments:
            return
        self._appointments.remove(appointment)
        logger.info("Appointment removed: {}", appointment)

    def remove_appointment_at(self, date: CalendarDate, timeslot: Timeslot, profile: Profile) -> None:
        self.remove_appointment(self.get_appointment(date, timeslot, profile))

    def get_appointment(
        self, date: CalendarDate, timeslot: Timeslot, profile: Profile
    ) -> AnyAppointment | None:
        """Find an appointment by date, slot and patient (names match case-insensitively)."""
        for appointment in self._appointments:
            if (
                appointment.date == date
                and appointment.timeslot == timeslot
                and appointment.patient.matches(profile)
            ):
                return appointment
        return None

    def appointment_exists(self, date: CalendarDate, timeslot: Timeslot, profile: Profile) -> bool:
        return self.get_appointment(date, timeslot, profile) is not None

    def appointments(self) -> list[AnyAppointment]:
        return list(self._appointments)

    def appointments_for_provider(self, provider: AnyProvider) -> list[AnyAppointment]:
        return [a for a in self._appointments if a.provider == provider]

    def appointments_for_patient(self, profile: Profile) -> list[AnyAppointment]:
        return [a for a in self._appointments if a.patient == profile]

    def sort_appointments(self, key: Callable[[AnyAppointment], Any]) -> None:
        """Stable in-place sort; ties keep their insertion order."""
        self._appointments.sort(key=key)

    def room_in_use(
        self,
        location: Location,
        timeslot: Timeslot,
        room: Radiology,
        date: CalendarDate | None = None,
    ) -> bool:
        """Whether an imaging room at ``location`` is taken at ``timeslot``.

        Rooms are reserved per time of day: ``date`` is only compared when the
        store was built with ``date_qualified_rooms``.
        """
        for appointment in self._appointments:
            if not isinstance(appointment, ImagingAppointment):
                continue
            if self._date_qualified_rooms and date is not None and appointment.date != date:
                continue
            if (
                appointment.provider.location is location
                and appointment.timeslot == timeslot
                and appointment.room is room
            ):
                return True
        return False

    def clear_active_appointments(self) -> None:
        count = len(self._appointments)
        self._appointments.clear()
        logger.info("Cleared {} active appointment(s)", count)

    def get_patient(self, profile: Profile) -> Patient | None:
        return self._patients.get(profile)

    def get_or_create_patient(self, profile: Profile) -> Patient:
        patient = self._patients.get(profile)
        if patient is None:
            patient = Patient(profile=profile)
            self._patients[profile] = patient
            logger.info("New patient record: {}", profile)
        return patient

    def patients(self) -> list[Patient]:
        return list(self._patients.values())

    def add_provider(self, provider: AnyProvider) -> None:
        self._providers.append(provider)

    def providers(self) -> list[AnyProvider]:
        return list(self._providers)

    def get_doctor(self, npi: str) -> Doctor | None:
        for provider in self._providers:
            if isinstance(provider, Doctor) and provider.npi == npi:
                return provider
        return None

    def doctor_exists(self, npi: str) -> bool:
        return self.get_doctor(npi) is not None

    @staticmethod
    def service_exists(service: str) -> bool:
        return Radiology.lookup(service) is not None

    @property
    def rotation_index(self) -> int:
        return self._rotation_index

    def _align_rotation(self) -> bool:
        """Move the cursor backward to the nearest technician, including itself."""
        size = len(self._providers)
        if size == 0:
            return False
        index = self._rotation_index % size
        for _ in range(size):
            if isinstance(self._providers[index], Technician):
                self._rotation_index = index
                return True
            index = (index - 1) % size
        return False

    def get_technician(self) -> Technician | None:
        if not self._align_rotation():
            return None
        return self._current_technician()

    def next_technician(self) -> Technician | None:
        """Advance to the previous technician in roster order, wrapping around."""
        if not self._align_rotation():
            return None
        size = len(self._providers)
        index = self._rotation_index
        for _ in range(size):
            index = (index - 1) % size
            provider = self._providers[index]
            if isinstance(provider, Technician):
                self._rotation_index = index
                logger.debug("Technician rotation moved to {}", provider.brief())
                return provider
        return self._current_technician()

    def technicians(self) -> list[Technician]:
        """One full rotation cycle starting at the current technician.

        The cursor ends where it started, so the snapshot can be retaken.
        """
        first = self.get_technician()
        if first is None:
            return []
        start = self._rotation_index
        rotation = [first]
        technician = self.next_technician()
        while self._rotation_index != start and technician is not None:
            rotation.append(technician)
            technician = self.next_technician()
        return rotation

    def _current_technician(self) -> Technician:
        return cast(Technician, self._providers[self._rotation_index])
