from collections.abc import Callable, Sequence

from loguru import logger

from clinic.domain.dates import CalendarDate, Timeslot
from clinic.domain.models import ImagingAppointment, Profile, Radiology
from clinic.formatting import time_to_12h
from clinic.scheduling.store import AnyAppointment, AppointmentStore

MISSING_TOKENS = "Missing data tokens."
DOES_NOT_EXIST = "{date} {time} {patient} - appointment does not exist."

_APPOINTMENT_DATE = "Appointment date: "
_PATIENT_DOB = "Patient dob: "
_MONTH_WORDS = (
    "zero", "one", "two", "three", "four", "five", "six",
    "seven", "eight", "nine", "ten", "eleven", "twelve",
)

Check = Callable[[], "str | None"]


def first_failure(*checks: Check) -> str | None:
    """Run checks in order and return the first error message, or ``None``."""
    for check in checks:
        error = check()
        if error:
            logger.debug("Validation failed: {}", error)
            return error
    return None


def _months_in_words(months: int) -> str:
    if 0 <= months < len(_MONTH_WORDS):
        return _MONTH_WORDS[months]
    return str(months)


def _parse_date(token: str, prefix: str) -> tuple[CalendarDate | None, str | None]:
    """Parse a ``M/D/YYYY`` token. Returns ``(date, None)`` or ``(None, error_msg)``."""
    try:
        date = CalendarDate.parse(token)
    except ValueError:
        date = None
    if date is None or not date.is_valid():
        return None, f"{prefix}{token} is not a valid calendar date"
    return date, None


def _parse_profile(first: str, last: str, dob: str) -> tuple[Profile | None, str | None]:
    date_of_birth, err = _parse_date(dob, _PATIENT_DOB)
    if err or date_of_birth is None:
        return None, err
    return Profile(first_name=first, last_name=last, date_of_birth=date_of_birth), None


class ScheduleValidator:
    """Input checks run before any scheduling command touches the store.

    Each check reads raw command tokens and returns ``None`` when they pass or
    a one-line message when they don't. Nothing is raised for bad input.
    Apart from the technician search, which advances the rotation past busy
    technicians, checks never change the store.
    """

    def __init__(
        self,
        store: AppointmentStore,
        *,
        schedule_window_months: int = 6,
        clock: Callable[[], CalendarDate] = CalendarDate.today,
    ) -> None:
        self._store = store
        self._window_months = schedule_window_months
        self._clock = clock

    def _timeslot(self, token: str) -> tuple[Timeslot | None, str | None]:
        timeslot = self._store.timeslots.lookup(token)
        if timeslot is None:
            return None, f"{token} is not a valid time slot."
        return timeslot, None

    def token_count(self, tokens: Sequence[str], expected: int, usage: str) -> str | None:
        if len(tokens) < expected:
            return MISSING_TOKENS
        if len(tokens) != expected:
            return usage
        return None

    def scheduled_date(self, token: str) -> str | None:
        """A weekday after today and no further out than the scheduling window."""
        date, err = _parse_date(token, _APPOINTMENT_DATE)
        if err or date is None:
            return err
        today = self._clock()
        if date <= today:
            return f"{_APPOINTMENT_DATE}{token} is today or a date before today."
        if date.is_weekend():
            return f"{_APPOINTMENT_DATE}{token} is Saturday or Sunday."
        if date > today.add_months(self._window_months):
            return (
                f"{_APPOINTMENT_DATE}{token} is not within "
                f"{_months_in_words(self._window_months)} months."
            )
        return None

    def timeslot(self, token: str) -> str | None:
        _, err = self._timeslot(token)
        return err

    def patient_info(self, first: str, last: str, dob: str) -> str | None:
        """The date of birth must be a real date before today."""
        date_of_birth, err = _parse_date(dob, _PATIENT_DOB)
        if err or date_of_birth is None:
            return err
        if date_of_birth >= self._clock():
            return f"{_PATIENT_DOB}{dob} is today or a date after today."
        return None

    def patient_availability(
        self, first: str, last: str, dob: str, date_token: str, timeslot_token: str
    ) -> str | None:
        profile, err = _parse_profile(first, last, dob)
        if err or profile is None:
            return err
        date, err = _parse_date(date_token, _APPOINTMENT_DATE)
        if err or date is None:
            return err
        timeslot, err = self._timeslot(timeslot_token)
        if err or timeslot is None:
            return err

        for appointment in self._store.appointments_for_patient(profile):
            if appointment.conflicts(date, timeslot):
                return (
                    f"{appointment.patient} has an existing appointment at "
                    f"{date} {time_to_12h(timeslot)}"
                )
        return None

    def doctor_npi(self, npi: str) -> str | None:
        if not self._store.doctor_exists(npi):
            return f"{npi} - provider doesn't exist."
        return None

    def imaging_service(self, service: str) -> str | None:
        if not self._store.service_exists(service):
            return f"{service} - imaging service not provided."
        return None

    def doctor_availability(self, npi: str, date_token: str, timeslot_token: str) -> str | None:
        doctor = self._store.get_doctor(npi)
        if doctor is None:
            return f"{npi} - provider doesn't exist."
        date, err = _parse_date(date_token, _APPOINTMENT_DATE)
        if err or date is None:
            return err
        timeslot, err = self._timeslot(timeslot_token)
        if err or timeslot is None:
            return err

        for appointment in self._store.appointments_for_provider(doctor):
            if appointment.conflicts(date, timeslot):
                return f"{doctor} is not available at slot {timeslot_token}"
        return None

    def technician_availability(
        self, service: str, date_token: str, timeslot_token: str
    ) -> str | None:
        """Look for a free technician, starting at the rotation cursor.

        Technicians whose room is taken, or who are already booked at that
        slot, are skipped and the rotation advances past them. On success the
        cursor is left on the free technician for the caller to assign.
        """
        room = Radiology.lookup(service)
        if room is None:
            return f"{service} - imaging service not provided."
        date, err = _parse_date(date_token, _APPOINTMENT_DATE)
        if err or date is None:
            return err
        timeslot, err = self._timeslot(timeslot_token)
        if err or timeslot is None:
            return err

        for technician in self._store.technicians():
            if self._store.room_in_use(technician.location, timeslot, room, date):
                self._store.next_technician()
                continue
            booked = any(
                appointment.conflicts(date, timeslot)
                for appointment in self._store.appointments_for_provider(technician)
            )
            if not booked:
                return None
            self._store.next_technician()

        return (
            f"Cannot find an available technician at all locations for {room.value} "
            f"at slot {timeslot_token}."
        )

    def appointment_exists(
        self,
        date_token: str,
        timeslot_token: str,
        first: str,
        last: str,
        dob: str,
        template: str = DOES_NOT_EXIST,
    ) -> str | None:
        """``template`` may use ``{date}``, ``{time}`` and ``{patient}``."""
        appointment, err = self._find(date_token, timeslot_token, first, last, dob)
        if err:
            return err
        if appointment is None:
            timeslot = self._store.timeslots.lookup(timeslot_token)
            return template.format(
                date=date_token,
                time=time_to_12h(timeslot) if timeslot is not None else timeslot_token,
                patient=Profile.from_tokens(first, last, dob),
            )
        return None

    def rescheduled_patient_availability(
        self,
        date_token: str,
        timeslot_token: str,
        first: str,
        last: str,
        dob: str,
        new_timeslot_token: str,
    ) -> str | None:
        """The booked patient must have no other appointment at the new slot.

        Other bookings are matched against the stored patient the same way the
        appointment itself was found, so name case in the tokens is irrelevant.
        """
        appointment, err = self._find(date_token, timeslot_token, first, last, dob)
        if err or appointment is None:
            return err
        timeslot, err = self._timeslot(new_timeslot_token)
        if err or timeslot is None:
            return err

        for booked in self._store.appointments():
            if (
                booked is not appointment
                and booked.patient.matches(appointment.patient)
                and booked.conflicts(appointment.date, timeslot)
            ):
                return (
                    f"{booked.patient} has an existing appointment at "
                    f"{appointment.date} {time_to_12h(timeslot)}"
                )
        return None

    def rescheduled_provider_availability(
        self,
        date_token: str,
        timeslot_token: str,
        first: str,
        last: str,
        dob: str,
        new_timeslot_token: str,
    ) -> str | None:
        """The booked provider, and for imaging its room, must be free at the new slot."""
        appointment, err = self._find(date_token, timeslot_token, first, last, dob)
        if err or appointment is None:
            return err
        timeslot, err = self._timeslot(new_timeslot_token)
        if err or timeslot is None:
            return err

        provider = appointment.provider
        for booked in self._store.appointments_for_provider(provider):
            if booked is not appointment and booked.conflicts(appointment.date, timeslot):
                return f"{provider} is not available at slot {new_timeslot_token}"
        if isinstance(appointment, ImagingAppointment) and self._store.room_in_use(
            provider.location, timeslot, appointment.room, appointment.date
        ):
            return (
                f"{appointment.room.value} room at {provider.location.name} "
                f"is not available at slot {new_timeslot_token}"
            )
        return None

    def _find(
        self, date_token: str, timeslot_token: str, first: str, last: str, dob: str
    ) -> tuple[AnyAppointment | None, str | None]:
        date, err = _parse_date(date_token, _APPOINTMENT_DATE)
        if err or date is None:
            return None, err
        timeslot, err = self._timeslot(timeslot_token)
        if err or timeslot is None:
            return None, err
        profile, err = _parse_profile(first, last, dob)
        if err or profile is None:
            return None, err
        return self._store.get_appointment(date, timeslot, profile), None
