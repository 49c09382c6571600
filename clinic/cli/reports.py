from collections.abc import Callable
from typing import Any

from clinic.domain.models import ImagingAppointment, OfficeAppointment
from clinic.formatting import format_currency
from clinic.scheduling.billing import credit_by_provider, finalize_statements
from clinic.scheduling.store import AnyAppointment, AppointmentStore

EMPTY_CALENDAR = "Schedule calendar is empty."
END_OF_LIST = "** end of list **"


def by_date_time_provider(appointment: AnyAppointment) -> tuple[Any, ...]:
    return appointment.date, appointment.timeslot, appointment.provider.profile


def by_county_date_time(appointment: AnyAppointment) -> tuple[Any, ...]:
    return appointment.provider.location.county, appointment.date, appointment.timeslot


def by_patient_date_time(appointment: AnyAppointment) -> tuple[Any, ...]:
    return appointment.patient, appointment.date, appointment.timeslot


def _listing(
    store: AppointmentStore,
    header: str,
    key: Callable[[AnyAppointment], Any],
    include: Callable[[AnyAppointment], bool] = lambda appointment: True,
) -> str:
    if not store.appointments():
        return EMPTY_CALENDAR
    store.sort_appointments(key)
    rows = [str(appointment) for appointment in store.appointments() if include(appointment)]
    return "\n".join([header, *rows, END_OF_LIST])


def appointments_by_date(store: AppointmentStore) -> str:
    return _listing(
        store, "** List of appointments, ordered by date/time/provider.", by_date_time_provider
    )


def appointments_by_patient(store: AppointmentStore) -> str:
    return _listing(store, "** Appointments ordered by patient/date/time.", by_patient_date_time)


def appointments_by_location(store: AppointmentStore) -> str:
    return _listing(
        store, "** List of appointments, ordered by county/date/time.", by_county_date_time
    )


def office_appointments(store: AppointmentStore) -> str:
    return _listing(
        store,
        "** List of office appointments ordered by county/date/time.",
        by_county_date_time,
        lambda appointment: isinstance(appointment, OfficeAppointment),
    )


def imaging_appointments(store: AppointmentStore) -> str:
    return _listing(
        store,
        "** List of radiology appointments ordered by county/date/time.",
        by_county_date_time,
        lambda appointment: isinstance(appointment, ImagingAppointment),
    )


def provider_credits(store: AppointmentStore) -> str:
    if not store.appointments():
        return EMPTY_CALENDAR
    rows = [
        f"({index}) {provider.profile} [credit amount: {format_currency(credit)}]"
        for index, (provider, credit) in enumerate(credit_by_provider(store), start=1)
    ]
    return "\n".join(["** Credit amount ordered by provider. **", *rows, END_OF_LIST])


def billing_statements(store: AppointmentStore) -> str:
    """Finalize all active appointments into patient statements.

    This empties the active schedule.
    """
    if not store.appointments():
        return EMPTY_CALENDAR
    rows = [
        f"({index}) {patient} [due: {format_currency(patient.charge())}]"
        for index, patient in enumerate(finalize_statements(store), start=1)
    ]
    return "\n".join(["** Billing statement ordered by patient. **", *rows, END_OF_LIST])


def providers_summary(store: AppointmentStore) -> str:
    providers = sorted(store.providers(), key=lambda provider: provider.profile.last_name)
    return "\n".join(str(provider) for provider in providers)


def rotation_summary(store: AppointmentStore) -> str:
    return " --> ".join(technician.brief() for technician in store.technicians())
