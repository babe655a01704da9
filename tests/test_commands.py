from tele_watchdog.commands import COMMANDS, GROUP_ORDER
from tele_watchdog.handlers import dispatch


def test_every_command_has_a_dispatch_handler() -> None:
    for spec in COMMANDS:
        assert callable(getattr(dispatch, spec.handler)), spec.name


def test_command_names_are_unique_and_grouped() -> None:
    names = [spec.name for spec in COMMANDS]
    assert len(names) == len(set(names))
    assert {spec.group for spec in COMMANDS} <= set(GROUP_ORDER)


def test_monitor_commands_are_master_only() -> None:
    for spec in COMMANDS:
        if spec.group == "Monitor":
            assert spec.scope == "master", spec.name
