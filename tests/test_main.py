from datetime import timedelta

import pytest

import media_cataloger.core as core_module
import media_cataloger.main as main_module
from media_cataloger import config
from media_cataloger.exceptions import ConfigError, TimezoneParseError
from media_cataloger.main import build_config, parse_args
from media_cataloger.models import Action, TimezoneSource

from conftest import FakeProvider


def test_defaults():
    args = parse_args(["rename", "/media"])
    cfg = build_config(args)

    assert cfg.timezone_source == TimezoneSource.MEDIA
    assert cfg.timezone_custom_str == "00:00"
    assert cfg.max_dates_distance == timedelta(hours=26)
    assert cfg.max_dates_distance_ms == 26 * 3600 * 1000
    assert cfg.action == Action.PRINT
    assert not cfg.strict_metadata
    assert not cfg.legacy_offset_arithmetic


def test_custom_values():
    args = parse_args(["rename", "/media", "-s", "custom", "--timezone-custom=-03:30",
                       "-d", "1h30m", "-a", "execute", "--strict-metadata"])
    cfg = build_config(args)

    assert cfg.timezone_source == TimezoneSource.CUSTOM
    assert cfg.timezone_custom.utcoffset(None) == -timedelta(hours=3, minutes=30)
    assert cfg.max_dates_distance == timedelta(minutes=90)
    assert cfg.action == Action.EXECUTE
    assert cfg.strict_metadata


def test_unknown_action_is_rejected_by_argparse():
    with pytest.raises(SystemExit):
        parse_args(["rename", "/media", "-a", "delete"])


def test_bad_timezone_is_fatal_at_startup():
    with pytest.raises(TimezoneParseError):
        build_config(parse_args(["rename", "/media", "-z", "bogus"]))


@pytest.mark.parametrize("value", ["26", "h", "1x", "-1h"])
def test_bad_duration(value):
    with pytest.raises(ConfigError):
        build_config(parse_args(["rename", "/media", f"--max-dates-distance={value}"]))


@pytest.mark.parametrize(
    "text,expected",
    [
        ("26h", timedelta(hours=26)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1.5h", timedelta(minutes=90)),
        ("250ms", timedelta(milliseconds=250)),
        ("90s", timedelta(seconds=90)),
        ("0", timedelta(0)),
        ("-2m", timedelta(minutes=-2)),
    ],
)
def test_parse_duration(text, expected):
    assert config.parse_duration(text) == expected


def test_main_runs_and_exits_on_fatal_error(tmp_path, monkeypatch):
    (tmp_path / "a.jpg").write_bytes(b"x")
    provider = FakeProvider({"a.jpg": {"CreateDate": "garbage"}})
    monkeypatch.setattr(core_module, "ExifToolProvider", lambda: provider)

    with pytest.raises(SystemExit) as exc:
        main_module.main(["rename", str(tmp_path), "--no-progress"])

    assert exc.value.code == 1
    assert provider.closed == 1


def test_main_execute(tmp_path, monkeypatch):
    (tmp_path / "a.jpg").write_bytes(b"x")
    provider = FakeProvider({"a.jpg": {"CreateDate": "2022:06:01 14:22:10"}})
    monkeypatch.setattr(core_module, "ExifToolProvider", lambda: provider)

    main_module.main(["rename", str(tmp_path), "-a", "execute", "--no-progress"])

    assert (tmp_path / "2022.06.01 14.22.10.dt (a).jpg").exists()


def test_main_missing_dir(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main_module.main(["rename", str(tmp_path / "nope"), "--no-progress"])
    assert exc.value.code == 1
