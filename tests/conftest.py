import os
from datetime import timedelta, timezone

import pytest

from media_cataloger.models import Action, MetadataRecord, RenameConfig, TimezoneSource
from media_cataloger.scanning.filesystem import DirectoryWalker


class FakeProvider:
    """In-memory metadata provider keyed by file name."""

    def __init__(self, tags_by_name=None, records_by_name=None):
        self.tags_by_name = tags_by_name or {}
        self.records_by_name = records_by_name or {}
        self.calls = []
        self.opened = 0
        self.closed = 0

    def extract(self, path):
        self.calls.append(path)
        if path.name in self.records_by_name:
            return self.records_by_name[path.name]
        return [MetadataRecord(path=path, fields=dict(self.tags_by_name.get(path.name, {})))]

    def __enter__(self):
        self.opened += 1
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.closed += 1


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def make_config():
    def _make(timezone_source=TimezoneSource.MEDIA,
              timezone_custom=timezone.utc,
              timezone_custom_str="00:00",
              max_dates_distance=timedelta(hours=26),
              action=Action.PRINT,
              **kwargs):
        return RenameConfig(
            timezone_source=timezone_source,
            timezone_custom=timezone_custom,
            timezone_custom_str=timezone_custom_str,
            max_dates_distance=max_dates_distance,
            action=action,
            **kwargs
        )
    return _make


@pytest.fixture
def make_entry(tmp_path):
    """Creates a file under tmp_path and returns its MediaFileEntry."""
    def _make(name, mtime=1_600_000_000.0, content=b"data"):
        p = tmp_path / name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(content)
        os.utime(p, (mtime, mtime))
        return DirectoryWalker().to_entry(p)
    return _make
