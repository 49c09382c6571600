from loguru import logger

from clinic.domain.models import Patient, ProviderLike
from clinic.scheduling.store import AppointmentStore


def finalize_statements(store: AppointmentStore) -> list[Patient]:
    """Bill every active appointment to its patient, then clear the active set.

    Returns all patients ordered by profile. Each visit keeps the provider's
    rate at the time it was finalised.
    """
    patients = sorted(store.patients(), key=lambda patient: patient.profile)
    billed = 0
    for appointment in store.appointments():
        patient = store.get_patient(appointment.patient)
        if patient is None:
            logger.warning("No patient record for appointment {}; not billed", appointment)
            continue
        patient.add_visit(appointment)
        billed += 1

    store.clear_active_appointments()
    logger.info("Finalized {} visit(s) across {} patient(s)", billed, len(patients))
    return patients


def credit_by_provider(store: AppointmentStore) -> list[tuple[ProviderLike, int]]:
    """Each provider, ordered by profile, with rate × active appointment count."""
    appointments = store.appointments()
    credits: list[tuple[ProviderLike, int]] = []
    for provider in sorted(store.providers(), key=lambda provider: provider.profile):
        visits = sum(1 for appointment in appointments if appointment.provider == provider)
        credits.append((provider, provider.rate() * visits))
    return credits
