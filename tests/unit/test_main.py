import io
from collections.abc import Iterator
from pathlib import Path

import pytest
from loguru import logger

from clinic.__main__ import build_store, main
from clinic.config import ClinicConfig

ROSTER = (
    "D  TOM  KAUR  4/12/1993  PRINCETON  ALLERGIST  05\n"
    "T  BEN  JERRY  10/9/1979  PRINCETON  90\n"
    "T  FRANK  LIN  5/23/1989  EDISON  100\n"
)


@pytest.fixture(autouse=True)
def isolated(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Run from an empty directory and drop the handler main() installs."""
    monkeypatch.chdir(tmp_path)
    yield
    logger.remove()


@pytest.fixture
def roster_file(tmp_path: Path) -> Path:
    path = tmp_path / "providers.txt"
    path.write_text(ROSTER, encoding="utf-8")
    return path


class TestBuildStore:
    def test_uses_configured_grid_and_roster(self, roster_file: Path) -> None:
        config = ClinicConfig(
            roster_path=str(roster_file), timeslot_block_starts=[8], slots_per_block=2
        )

        store = build_store(config)

        assert [str(slot) for slot in store.timeslots] == ["08:00", "08:30"]
        assert len(store.providers()) == 3


class TestMain:
    def test_session(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        roster_file: Path,
    ) -> None:
        monkeypatch.setenv("CLINIC_ROSTER_PATH", str(roster_file))
        monkeypatch.setattr("sys.stdin", io.StringIO("PA\nX\nQ\n"))

        assert main() == 0

        out = capsys.readouterr().out.splitlines()
        assert out[0] == "Providers loaded to the list."
        assert "FRANK LIN (EDISON) --> BEN JERRY (PRINCETON)" in out
        assert out[-3:] == [
            "Schedule calendar is empty.",
            "Invalid command!",
            "Clinic Manager terminated.",
        ]

    def test_bad_roster_exits_nonzero(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        bad = tmp_path / "bad.txt"
        bad.write_text("Z  nobody\n", encoding="utf-8")
        monkeypatch.setenv("CLINIC_ROSTER_PATH", str(bad))

        assert main() == 1

    def test_missing_roster_exits_nonzero(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("CLINIC_ROSTER_PATH", str(tmp_path / "missing.txt"))

        assert main() == 1
