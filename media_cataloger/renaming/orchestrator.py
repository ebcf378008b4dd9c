import os
import logging

from .. import config
from ..dating.drift import format_distance, is_too_far
from ..dating.resolver import DateResolver
from ..dating.timezone import apply_timezone
from ..exceptions import (
    EntryProcessingError,
    MediaCatalogerError,
    RenameExecutionError,
)
from ..models import Action, DecisionKind, MediaFileEntry, RenameConfig, RenameDecision
from ..naming import codec


class RenameOrchestrator:
    """
    Drives one file through decode -> resolve -> timezone -> encode -> drift
    check and decides what to do with it.

    Nothing on disk changes unless the decision is EXECUTE.
    """

    def __init__(self, resolver: DateResolver, rename_config: RenameConfig):
        self.resolver = resolver
        self.config = rename_config

    def process(self, entry: MediaFileEntry) -> RenameDecision:
        decision = self.decide(entry)
        self.apply(decision)
        return decision

    def apply(self, decision: RenameDecision):
        """Reports a decision and renames the file if it is EXECUTE."""
        self.report(decision)
        if decision.kind == DecisionKind.EXECUTE:
            self.execute(decision)

    def decide(self, entry: MediaFileEntry) -> RenameDecision:
        if entry.ext not in config.SUPPORTED_EXTS:
            return RenameDecision(kind=DecisionKind.SKIP_UNSUPPORTED, entry=entry)

        try:
            parsed = codec.decode(entry.stem)
        except MediaCatalogerError as e:
            raise EntryProcessingError(entry.path, "decode filename", e) from e

        try:
            resolved = self.resolver.resolve(entry, parsed.original_filename)
        except MediaCatalogerError as e:
            raise EntryProcessingError(entry.path, "resolve date", e) from e

        resolved = apply_timezone(resolved, self.config)

        new_stem = codec.encode(resolved.value, resolved.source, parsed.original_filename)
        if new_stem == entry.stem:
            return RenameDecision(kind=DecisionKind.ALREADY_CORRECT, entry=entry, resolved=resolved)

        new_filename = f"{new_stem}.{entry.ext}"
        decision = RenameDecision(
            kind=DecisionKind.PRINT_ONLY,
            entry=entry,
            new_filename=new_filename,
            new_path=entry.directory / new_filename,
            resolved=resolved,
        )

        if parsed.prior_date is not None:
            decision.distance = resolved.value - parsed.prior_date
            if is_too_far(resolved.value, parsed.prior_date, self.config.max_dates_distance_ms):
                decision.kind = DecisionKind.WARN_DRIFT_SKIP
                return decision

        if self.config.action == Action.EXECUTE:
            decision.kind = DecisionKind.EXECUTE
        return decision

    def execute(self, decision: RenameDecision):
        src = decision.old_path
        dest = decision.new_path

        # os.rename silently replaces an existing file on POSIX
        if dest.exists():
            raise RenameExecutionError("os.rename", src, dest, "destination already exists")
        try:
            os.rename(src, dest)
        except OSError as e:
            raise RenameExecutionError("os.rename", src, dest, str(e)) from e

    def report(self, decision: RenameDecision):
        """Logs one line per media file."""
        kind = decision.kind
        name = decision.entry.name

        if kind == DecisionKind.SKIP_UNSUPPORTED:
            logging.debug(f"{name} - unsupported extension, skipping")
            return
        if kind == DecisionKind.ALREADY_CORRECT:
            logging.info(f"{name} - ok filename")
            return

        line = f"{name} => {decision.new_filename}"
        if decision.distance is not None:
            line += f" - {format_distance(decision.distance)}"

        if kind == DecisionKind.WARN_DRIFT_SKIP:
            logging.warning(f"{line} - Warning: Old date and new date are too far, skipping")
        elif kind == DecisionKind.EXECUTE:
            logging.info(f"{line}, renaming")
        else:
            logging.info(f"{line}, printing")
