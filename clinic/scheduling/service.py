from collections.abc import Sequence

from loguru import logger

from clinic.domain.dates import CalendarDate, Timeslot
from clinic.domain.exceptions import InvalidAppointmentError
from clinic.domain.models import ImagingAppointment, OfficeAppointment, Profile, Radiology
from clinic.formatting import time_to_12h
from clinic.scheduling.store import AppointmentStore
from clinic.scheduling.validation import ScheduleValidator, first_failure

DATE_INDEX = 0
TIMESLOT_INDEX = 1
FIRST_NAME_INDEX = 2
LAST_NAME_INDEX = 3
DOB_INDEX = 4
# NPI, imaging service or new timeslot, depending on the command.
EXTRA_INDEX = 5

BOOKING_TOKEN_COUNT = 6
CANCEL_TOKEN_COUNT = 5
RESCHEDULE_TOKEN_COUNT = 6

OFFICE_USAGE = (
    "Usage: D,<MM/DD/YYYY>,<timeslot>,<patient first name>,<patient last name>,"
    "<patient date of birth>,<doctor NPI>"
)
IMAGING_USAGE = (
    "Usage: T,<MM/DD/YYYY>,<timeslot>,<patient first name>,<patient last name>,"
    "<patient date of birth>,<imaging service>"
)
CANCEL_USAGE = (
    "Usage: C,<MM/DD/YYYY>,<timeslot>,<patient first name>,<patient last name>,"
    "<patient date of birth>"
)
RESCHEDULE_USAGE = (
    "Usage: R,<MM/DD/YYYY>,<timeslot>,<patient first name>,<patient last name>,"
    "<patient date of birth>,<new timeslot>"
)
RESCHEDULE_DOES_NOT_EXIST = "{date} {time} {patient} does not exist."


class SchedulingService:
    """Book, cancel and reschedule appointments from command tokens.

    Every operation validates first and only then mutates the store, so a
    rejected request leaves no trace. Each call returns a single output line.
    """

    def __init__(self, store: AppointmentStore, validator: ScheduleValidator) -> None:
        self._store = store
        self._validator = validator

    def schedule_office(self, tokens: Sequence[str]) -> str:
        """Book an office visit: ``date, timeslot, first, last, dob, npi``."""
        v = self._validator
        error = first_failure(
            lambda: v.token_count(tokens, BOOKING_TOKEN_COUNT, OFFICE_USAGE),
            lambda: v.scheduled_date(tokens[DATE_INDEX]),
            lambda: v.timeslot(tokens[TIMESLOT_INDEX]),
            lambda: v.patient_info(*_patient_tokens(tokens)),
            lambda: v.patient_availability(
                *_patient_tokens(tokens), tokens[DATE_INDEX], tokens[TIMESLOT_INDEX]
            ),
            lambda: v.doctor_npi(tokens[EXTRA_INDEX]),
            lambda: v.doctor_availability(
                tokens[EXTRA_INDEX], tokens[DATE_INDEX], tokens[TIMESLOT_INDEX]
            ),
        )
        if error:
            return error

        date, timeslot = self._slot(tokens)
        patient = self._store.get_or_create_patient(Profile.from_tokens(*_patient_tokens(tokens)))
        doctor = self._store.get_doctor(tokens[EXTRA_INDEX])
        if doctor is None:
            raise InvalidAppointmentError(f"no doctor with NPI {tokens[EXTRA_INDEX]}")

        appointment = OfficeAppointment(
            date=date, timeslot=timeslot, patient=patient.profile, provider=doctor
        )
        self._store.add_appointment(appointment)
        logger.info("Office visit booked with NPI {}", doctor.npi)
        return f"{appointment} booked."

    def schedule_imaging(self, tokens: Sequence[str]) -> str:
        """Book an imaging visit: ``date, timeslot, first, last, dob, service``.

        The technician is whoever the rotation lands on after skipping busy
        technicians and rooms; the rotation then moves on to the next one.
        """
        v = self._validator
        error = first_failure(
            lambda: v.token_count(tokens, BOOKING_TOKEN_COUNT, IMAGING_USAGE),
            lambda: v.scheduled_date(tokens[DATE_INDEX]),
            lambda: v.timeslot(tokens[TIMESLOT_INDEX]),
            lambda: v.patient_info(*_patient_tokens(tokens)),
            lambda: v.patient_availability(
                *_patient_tokens(tokens), tokens[DATE_INDEX], tokens[TIMESLOT_INDEX]
            ),
            lambda: v.imaging_service(tokens[EXTRA_INDEX]),
            lambda: v.technician_availability(
                tokens[EXTRA_INDEX], tokens[DATE_INDEX], tokens[TIMESLOT_INDEX]
            ),
        )
        if error:
            return error

        date, timeslot = self._slot(tokens)
        patient = self._store.get_or_create_patient(Profile.from_tokens(*_patient_tokens(tokens)))
        technician = self._store.get_technician()
        room = Radiology.lookup(tokens[EXTRA_INDEX])
        if technician is None or room is None:
            raise InvalidAppointmentError("no technician or room to assign")
        self._store.next_technician()

        appointment = ImagingAppointment(
            date=date,
            timeslot=timeslot,
            patient=patient.profile,
            provider=technician,
            room=room,
        )
        self._store.add_appointment(appointment)
        logger.info("Imaging visit booked with {} in {}", technician.brief(), room.value)
        return f"{appointment} booked."

    def cancel(self, tokens: Sequence[str]) -> str:
        """Cancel an appointment: ``date, timeslot, first, last, dob``."""
        v = self._validator
        error = first_failure(
            lambda: v.token_count(tokens, CANCEL_TOKEN_COUNT, CANCEL_USAGE),
            lambda: v.scheduled_date(tokens[DATE_INDEX]),
            lambda: v.timeslot(tokens[TIMESLOT_INDEX]),
            lambda: v.patient_info(*_patient_tokens(tokens)),
            lambda: v.appointment_exists(
                tokens[DATE_INDEX], tokens[TIMESLOT_INDEX], *_patient_tokens(tokens)
            ),
        )
        if error:
            return error

        date, timeslot = self._slot(tokens)
        profile = Profile.from_tokens(*_patient_tokens(tokens))
        self._store.remove_appointment_at(date, timeslot, profile)
        return f"{date} {time_to_12h(timeslot)} {profile} - appointment has been canceled."

    def reschedule(self, tokens: Sequence[str]) -> str:
        """Move an appointment to another slot on the same day with the same provider."""
        v = self._validator
        error = first_failure(
            lambda: v.token_count(tokens, RESCHEDULE_TOKEN_COUNT, RESCHEDULE_USAGE),
            lambda: v.scheduled_date(tokens[DATE_INDEX]),
            lambda: v.timeslot(tokens[TIMESLOT_INDEX]),
            lambda: v.patient_info(*_patient_tokens(tokens)),
            lambda: v.appointment_exists(
                tokens[DATE_INDEX],
                tokens[TIMESLOT_INDEX],
                *_patient_tokens(tokens),
                template=RESCHEDULE_DOES_NOT_EXIST,
            ),
            lambda: v.timeslot(tokens[EXTRA_INDEX]),
            lambda: v.rescheduled_patient_availability(
                tokens[DATE_INDEX],
                tokens[TIMESLOT_INDEX],
                *_patient_tokens(tokens),
                tokens[EXTRA_INDEX],
            ),
            lambda: v.rescheduled_provider_availability(
                tokens[DATE_INDEX],
                tokens[TIMESLOT_INDEX],
                *_patient_tokens(tokens),
                tokens[EXTRA_INDEX],
            ),
        )
        if error:
            return error

        date, timeslot = self._slot(tokens)
        profile = Profile.from_tokens(*_patient_tokens(tokens))
        appointment = self._store.get_appointment(date, timeslot, profile)
        new_timeslot = self._store.timeslots.lookup(tokens[EXTRA_INDEX])
        if appointment is None or new_timeslot is None:
            raise InvalidAppointmentError("appointment vanished during reschedule")

        moved = appointment.model_copy(update={"timeslot": new_timeslot})
        self._store.remove_appointment(appointment)
        self._store.add_appointment(moved)
        return f"Rescheduled to {moved}"

    def _slot(self, tokens: Sequence[str]) -> tuple[CalendarDate, Timeslot]:
        """Date and timeslot from tokens that already passed validation."""
        date = CalendarDate.parse(tokens[DATE_INDEX])
        timeslot = self._store.timeslots.lookup(tokens[TIMESLOT_INDEX])
        if timeslot is None:
            raise InvalidAppointmentError(f"unknown timeslot {tokens[TIMESLOT_INDEX]}")
        return date, timeslot


def _patient_tokens(tokens: Sequence[str]) -> tuple[str, str, str]:
    return tokens[FIRST_NAME_INDEX], tokens[LAST_NAME_INDEX], tokens[DOB_INDEX]
