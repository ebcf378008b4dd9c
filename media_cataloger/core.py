import logging
from pathlib import Path
from typing import Callable, Optional

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from .dating.drift import format_distance
from .dating.resolver import DateResolver, MetadataProvider
from .metadata.extract import ExifToolProvider
from .models import RenameConfig, RenameStats
from .renaming.orchestrator import RenameOrchestrator
from .scanning.filesystem import DirectoryWalker


class MediaCatalogerApp:
    def __init__(self,
                 rename_config: RenameConfig,
                 provider_factory: Optional[Callable[[], MetadataProvider]] = None,
                 show_progress: bool = True):
        self.config = rename_config
        self.provider_factory = provider_factory or ExifToolProvider
        self.show_progress = show_progress
        self.walker = DirectoryWalker()

    def rename(self, media_dir: Path) -> RenameStats:
        """
        Walks media_dir and renames (or prints) every supported media file.

        1. Open the metadata provider (once)
        2. Decide, report and optionally rename each file
        3. Close the provider (once), log the summary

        Any fatal error stops the walk; the summary is logged regardless.
        """
        stats = RenameStats()
        self._log_settings(media_dir)

        try:
            with self.provider_factory() as provider:
                resolver = DateResolver(provider, self.config)
                orchestrator = RenameOrchestrator(resolver, self.config)

                with logging_redirect_tqdm():
                    entries = tqdm(self.walker.walk(media_dir), desc="Renaming",
                                   unit="file", disable=not self.show_progress)
                    for entry in entries:
                        stats.seen(entry)
                        decision = orchestrator.decide(entry)
                        stats.record(decision)
                        orchestrator.apply(decision)
        finally:
            for line in stats.summary_lines():
                logging.info(line)

        return stats

    def _log_settings(self, media_dir: Path):
        logging.info(f"Media Dir: {media_dir}")
        logging.info(f"Timezone Source: {self.config.timezone_source.value}")
        logging.info(f"Timezone Custom: {self.config.timezone_custom_str}")
        logging.info(f"Max Dates Distance: {format_distance(self.config.max_dates_distance)}")
        logging.info(f"Action: {self.config.action.value}")
