from pathlib import Path

import pytest
from exiftool.exceptions import ExifToolJSONInvalidError, ExifToolNotRunning, ExifToolOutputEmptyError

import media_cataloger.metadata.extract as extract_module
from media_cataloger.exceptions import MetadataExtractionError, ProviderTeardownError
from media_cataloger.metadata.extract import ExifToolProvider


# Mock ExifTool class structure
class MockExifTool:
    instances = []

    def __init__(self, executable=None, common_args=None):
        self.executable = executable
        self.common_args = common_args
        self.running = False
        self.terminated = 0
        self.outputs = {}
        self.fail_terminate = False
        MockExifTool.instances.append(self)

    def run(self):
        self.running = True

    def terminate(self):
        self.terminated += 1
        if self.fail_terminate:
            raise ExifToolNotRunning("gone")
        self.running = False

    def execute_json(self, *params):
        out = self.outputs.get(params[-1])
        if isinstance(out, Exception):
            raise out
        return out


@pytest.fixture
def mock_tool(monkeypatch):
    MockExifTool.instances = []
    monkeypatch.setattr(extract_module, "ExifTool", MockExifTool)
    return MockExifTool


def test_provider_starts_once_with_common_args(mock_tool):
    with ExifToolProvider() as provider:
        assert provider.running
        provider.open()

    assert len(mock_tool.instances) == 1
    tool = mock_tool.instances[0]
    assert tool.common_args == ["-n", "-charset", "filename=utf8"]
    assert tool.terminated == 1


def test_extract_converts_values_and_error(mock_tool):
    provider = ExifToolProvider()
    provider.open()
    tool = mock_tool.instances[0]
    tool.outputs["/m/a.jpg"] = [{
        "SourceFile": "/m/a.jpg",
        "CreateDate": "2022:06:01 14:22:10",
        "ImageWidth": 4032,
    }]
    tool.outputs["/m/b.jpg"] = [{"SourceFile": "/m/b.jpg", "Error": "File format error"}]

    records = provider.extract(Path("/m/a.jpg"))
    assert len(records) == 1
    assert records[0].fields["CreateDate"] == "2022:06:01 14:22:10"
    assert records[0].fields["ImageWidth"] == "4032"
    assert records[0].error is None

    records = provider.extract(Path("/m/b.jpg"))
    assert records[0].error == "File format error"
    assert "Error" not in records[0].fields

    provider.close()


def test_extract_empty_and_invalid_output(mock_tool):
    provider = ExifToolProvider()
    provider.open()
    tool = mock_tool.instances[0]
    tool.outputs["/m/gone.jpg"] = ExifToolOutputEmptyError(1, "", "File not found", ["/m/gone.jpg"])
    tool.outputs["/m/junk.jpg"] = ExifToolJSONInvalidError(0, "{", "", ["/m/junk.jpg"])

    assert provider.extract(Path("/m/gone.jpg")) == []
    records = provider.extract(Path("/m/junk.jpg"))
    assert len(records) == 1
    assert records[0].error


def test_extract_before_open_fails(mock_tool):
    with pytest.raises(MetadataExtractionError):
        ExifToolProvider().extract(Path("/m/a.jpg"))


def test_missing_exiftool_binary(monkeypatch):
    def no_binary(*args, **kwargs):
        raise FileNotFoundError("exiftool")

    monkeypatch.setattr(extract_module, "ExifTool", no_binary)

    with pytest.raises(MetadataExtractionError):
        ExifToolProvider().open()


def test_teardown_failure_raised_on_clean_exit(mock_tool):
    with pytest.raises(ProviderTeardownError):
        with ExifToolProvider():
            mock_tool.instances[0].fail_terminate = True


def test_teardown_failure_does_not_mask_earlier_error(mock_tool):
    with pytest.raises(KeyError):
        with ExifToolProvider():
            mock_tool.instances[0].fail_terminate = True
            raise KeyError("walk failed")
    assert mock_tool.instances[0].terminated == 1
