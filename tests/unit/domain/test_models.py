import pydantic
import pytest
from pydantic import TypeAdapter

from clinic.domain.dates import CalendarDate, Timeslot
from clinic.domain.models import (
    Appointment,
    Doctor,
    ImagingAppointment,
    Location,
    OfficeAppointment,
    Patient,
    Profile,
    Provider,
    ProviderLike,
    Radiology,
    Specialty,
    Technician,
)

NINE_AM = Timeslot(hour=9, minute=0)
VISIT_DAY = CalendarDate(year=2024, month=1, day=16)


@pytest.fixture
def doctor() -> Doctor:
    return Doctor(
        profile=Profile.from_tokens("Andrew", "Patel", "1/21/1989"),
        location=Location.BRIDGEWATER,
        specialty=Specialty.FAMILY,
        npi="01",
    )


@pytest.fixture
def technician() -> Technician:
    return Technician(
        profile=Profile.from_tokens("Gary", "Johnson", "11/23/1981"),
        location=Location.BRIDGEWATER,
        rate_per_visit=120,
    )


class TestProfile:
    @pytest.mark.parametrize(
        ("left", "right", "expected"),
        [
            (("John", "Doe", "1/1/1990"), ("John", "Smith", "1/2/1991"), -1),
            (("Alice", "Johnson", "3/3/1992"), ("Bob", "Johnson", "4/4/1993"), -1),
            (("Chris", "Brown", "5/5/1994"), ("Chris", "Brown", "6/6/1995"), -1),
            (("David", "Wilson", "7/7/1996"), ("David", "Wilson", "7/7/1996"), 0),
            (("John", "Doe", "10/10/1999"), ("Johnny", "Doer", "11/11/2000"), -1),
            (("Bob", "Johnson", "4/4/1993"), ("Alice", "Johnson", "3/3/1992"), 1),
            (("Chris", "Brown", "6/6/1995"), ("Chris", "Brown", "5/5/1994"), 1),
        ],
        ids=[
            "last-name",
            "first-name",
            "dob",
            "identical",
            "name-prefixes",
            "first-name-reversed",
            "dob-reversed",
        ],
    )
    def test_compare(
        self, left: tuple[str, str, str], right: tuple[str, str, str], expected: int
    ) -> None:
        assert Profile.from_tokens(*left).compare(Profile.from_tokens(*right)) == expected

    def test_equality_is_exact(self) -> None:
        profile = Profile.from_tokens("John", "Doe", "5/1/1990")

        assert profile == Profile.from_tokens("John", "Doe", "05/01/1990")
        assert profile != Profile.from_tokens("john", "Doe", "5/1/1990")

    def test_matches_ignores_name_case(self) -> None:
        profile = Profile.from_tokens("John", "Doe", "5/1/1990")

        assert profile.matches(Profile.from_tokens("JOHN", "doe", "5/1/1990"))
        assert not profile.matches(Profile.from_tokens("John", "Doe", "5/2/1990"))

    def test_sorts_with_rich_comparisons(self) -> None:
        profiles = [
            Profile.from_tokens("Zed", "Adams", "1/1/1990"),
            Profile.from_tokens("Amy", "Adams", "1/1/1990"),
            Profile.from_tokens("Amy", "Baker", "1/1/1980"),
        ]

        assert [p.first_name for p in sorted(profiles)] == ["Amy", "Zed", "Amy"]

    def test_str(self) -> None:
        assert str(Profile.from_tokens("John", "Doe", "05/01/1990")) == "John Doe 5/1/1990"


class TestProviders:
    def test_doctor_rate_comes_from_specialty(self, doctor: Doctor) -> None:
        assert doctor.rate() == 250

    def test_technician_rate_is_flat(self, technician: Technician) -> None:
        assert technician.rate() == 120

    def test_technician_rate_cannot_be_negative(self, technician: Technician) -> None:
        with pytest.raises(pydantic.ValidationError):
            Technician(profile=technician.profile, location=technician.location, rate_per_visit=-1)

    def test_doctor_str(self, doctor: Doctor) -> None:
        assert str(doctor) == "[Andrew Patel 1/21/1989, BRIDGEWATER, Somerset 08807][FAMILY, #01]"

    def test_technician_str_and_brief(self, technician: Technician) -> None:
        assert str(technician) == (
            "[Gary Johnson 11/23/1981, BRIDGEWATER, Somerset 08807][rate: $120.00]"
        )
        assert technician.brief() == "Gary Johnson (BRIDGEWATER)"

    def test_both_variants_expose_provider_capabilities(
        self, doctor: Doctor, technician: Technician
    ) -> None:
        providers: list[ProviderLike] = [doctor, technician]

        assert all(isinstance(provider, ProviderLike) for provider in providers)
        assert [provider.rate() for provider in providers] == [250, 120]

    def test_provider_union_discriminates_on_kind(self, doctor: Doctor) -> None:
        adapter = TypeAdapter(Provider)

        parsed = adapter.validate_python(doctor.model_dump())

        assert isinstance(parsed, Doctor)
        assert parsed == doctor

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("edison", Location.EDISON), ("Clark", Location.CLARK), ("Newark", None)],
    )
    def test_location_lookup(self, name: str, expected: Location | None) -> None:
        assert Location.lookup(name) is expected

    def test_location_county_and_zip(self) -> None:
        assert Location.PISCATAWAY.county == "Middlesex"
        assert Location.PISCATAWAY.zip_code == "08854"

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("xray", Radiology.XRAY), ("CatScan", Radiology.CATSCAN), ("mri", None)],
    )
    def test_radiology_lookup(self, name: str, expected: Radiology | None) -> None:
        assert Radiology.lookup(name) is expected


class TestAppointments:
    def test_conflicts_on_same_date_and_slot_only(self, doctor: Doctor) -> None:
        appointment = OfficeAppointment(
            date=VISIT_DAY,
            timeslot=NINE_AM,
            patient=Profile.from_tokens("John", "Doe", "5/1/1990"),
            provider=doctor,
        )

        assert appointment.conflicts(VISIT_DAY, NINE_AM)
        assert not appointment.conflicts(VISIT_DAY, Timeslot(hour=9, minute=30))
        assert not appointment.conflicts(CalendarDate(year=2024, month=1, day=17), NINE_AM)

    def test_office_str(self, doctor: Doctor) -> None:
        appointment = OfficeAppointment(
            date=VISIT_DAY,
            timeslot=Timeslot(hour=14, minute=30),
            patient=Profile.from_tokens("John", "Doe", "5/1/1990"),
            provider=doctor,
        )

        assert str(appointment) == f"1/16/2024 2:30 PM John Doe 5/1/1990 {doctor}"

    def test_imaging_str_appends_room(self, technician: Technician) -> None:
        appointment = ImagingAppointment(
            date=VISIT_DAY,
            timeslot=NINE_AM,
            patient=Profile.from_tokens("John", "Doe", "5/1/1990"),
            provider=technician,
            room=Radiology.XRAY,
        )

        assert str(appointment).endswith(f"{technician}[XRAY]")

    def test_appointments_are_immutable(self, doctor: Doctor) -> None:
        appointment = OfficeAppointment(
            date=VISIT_DAY,
            timeslot=NINE_AM,
            patient=Profile.from_tokens("John", "Doe", "5/1/1990"),
            provider=doctor,
        )

        with pytest.raises(pydantic.ValidationError):
            appointment.timeslot = Timeslot(hour=10, minute=0)  # type: ignore[misc]

    def test_appointment_union_discriminates_on_kind(self, technician: Technician) -> None:
        imaging = ImagingAppointment(
            date=VISIT_DAY,
            timeslot=NINE_AM,
            patient=Profile.from_tokens("John", "Doe", "5/1/1990"),
            provider=technician,
            room=Radiology.ULTRASOUND,
        )

        parsed = TypeAdapter(Appointment).validate_python(imaging.model_dump())

        assert isinstance(parsed, ImagingAppointment)
        assert parsed.room is Radiology.ULTRASOUND


class TestPatient:
    def test_charge_sums_visit_history(self, doctor: Doctor, technician: Technician) -> None:
        profile = Profile.from_tokens("John", "Doe", "5/1/1990")
        patient = Patient(profile=profile)

        patient.add_visit(
            OfficeAppointment(date=VISIT_DAY, timeslot=NINE_AM, patient=profile, provider=doctor)
        )
        patient.add_visit(
            ImagingAppointment(
                date=VISIT_DAY,
                timeslot=Timeslot(hour=10, minute=0),
                patient=profile,
                provider=technician,
                room=Radiology.CATSCAN,
            )
        )

        assert [visit.charge for visit in patient.visits] == [250, 120]
        assert patient.charge() == 370

    def test_new_patient_owes_nothing(self) -> None:
        assert Patient(profile=Profile.from_tokens("Jane", "Doe", "1/1/2000")).charge() == 0
