from pathlib import Path
from models import Disposition, DispositionKind


def test_exit_codes():
    assert Disposition.success("https://x/dashboard").exit_code == 0
    assert Disposition.failure_known("Invalid", "https://x/auth/login").exit_code == 1
    assert Disposition.failure_unknown("https://x/auth/login").exit_code == 1
    assert Disposition.error("boom").exit_code == 1
    assert Disposition.configuration_error("missing").exit_code == 1
    assert Disposition.challenge().exit_code == 2


def test_only_success_is_ok():
    for kind in DispositionKind:
        d = Disposition(kind=kind, stage="s", message="m")
        assert d.ok == (kind == DispositionKind.SUCCESS)


def test_to_event_carries_screenshot():
    d = Disposition.error("boom").with_screenshot(Path("99-error.png"))
    event = d.to_event()
    assert event.ok is False
    assert event.stage == "exception"
    assert event.message == "boom"
    assert event.screenshot == Path("99-error.png")


def test_with_screenshot_returns_copy():
    d = Disposition.challenge()
    assert d.with_screenshot(Path("a.png")) is not d
    assert d.screenshot is None
