import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from exiftool import ExifTool
from exiftool.exceptions import (
    ExifToolException,
    ExifToolJSONInvalidError,
    ExifToolOutputEmptyError,
)

from .. import config
from ..exceptions import MetadataExtractionError, ProviderTeardownError
from ..models import MetadataRecord


class ExifToolProvider:
    """
    Metadata provider backed by a single long-lived 'exiftool -stay_open' process.

    Open it once before the walk and close it once after, preferably with
    `with ExifToolProvider() as provider:`. exiftool must be installed and on PATH.

    When the block exits because of an error, a failure to shut exiftool down
    is only logged so the original error is the one that propagates.
    """

    def __init__(self,
                 executable: Optional[str] = None,
                 common_args: Optional[Sequence[str]] = None):
        self.executable = executable
        self.common_args = list(common_args if common_args is not None else config.EXIFTOOL_COMMON_ARGS)
        self._tool: Any = None

    @property
    def running(self) -> bool:
        return self._tool is not None and self._tool.running

    def open(self):
        if self.running:
            return
        try:
            # ExifTool() validates the executable, so it is created here, not in __init__
            self._tool = ExifTool(executable=self.executable, common_args=self.common_args)
            self._tool.run()
        except (ExifToolException, OSError) as e:
            self._tool = None
            raise MetadataExtractionError(f"Failed to start exiftool: {e}") from e
        logging.debug(f"exiftool started (args: {' '.join(self.common_args)})")

    def close(self):
        if not self.running:
            self._tool = None
            return
        try:
            self._tool.terminate()
        except (ExifToolException, OSError) as e:
            raise ProviderTeardownError(f"Failed to stop exiftool: {e}") from e
        finally:
            self._tool = None
        logging.debug("exiftool stopped")

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.close()
            return
        try:
            self.close()
        except ProviderTeardownError as e:
            logging.error(f"{e} (while handling: {exc_val!r})")

    def extract(self, path: Path) -> List[MetadataRecord]:
        """
        Returns the records exiftool produced for one file.

        An empty list means exiftool printed nothing (e.g. unreadable file);
        a record with `error` set means exiftool reported a problem with the file.
        """
        if not self.running:
            raise MetadataExtractionError(f"exiftool is not running (extracting {path})")
        try:
            data_list = self._tool.execute_json(str(path))
        except ExifToolOutputEmptyError as e:
            logging.debug(f"exiftool returned no output for {path}: {e}")
            return []
        except ExifToolJSONInvalidError as e:
            return [MetadataRecord(path=path, fields={}, error=f"invalid exiftool output: {e}")]
        except ExifToolException as e:
            raise MetadataExtractionError(f"exiftool failed for {path}: {e}") from e

        if not data_list:
            return []
        return [self._to_record(path, item) for item in data_list]

    def _to_record(self, path: Path, tags: Dict[str, Any]) -> MetadataRecord:
        # Values are compared as text; -n turns some of them into numbers
        fields: Dict[str, Optional[str]] = {
            key: (None if value is None else str(value))
            for key, value in tags.items()
        }
        error = fields.pop('Error', None)
        return MetadataRecord(path=path, fields=fields, error=error)
