import os
import logging
from pathlib import Path
from typing import Iterator

from ..models import MediaFileEntry


class DirectoryWalker:
    """
    Yields a MediaFileEntry for every file under a root directory.

    Symlinks to files are yielded under the link's own path (renaming one
    renames the link), with the target's mtime. Symlinked directories are not
    descended into and broken links are skipped.

    Each directory is listed completely before any of its files is yielded,
    so renaming a yielded file does not disturb the traversal.
    """

    def walk(self, root: Path) -> Iterator[MediaFileEntry]:
        for path in self._iter_files(root):
            yield self.to_entry(path)

    def to_entry(self, path: Path) -> MediaFileEntry:
        path = path.absolute()
        suffix = path.suffix
        stem = path.name[:-len(suffix)] if suffix else path.name
        return MediaFileEntry(
            path=path,
            directory=path.parent,
            stem=stem,
            ext=suffix.lstrip('.').lower(),
            mtime=path.stat().st_mtime,
        )

    def _iter_files(self, root: Path) -> Iterator[Path]:
        """Depth-first walker using os.scandir for speed."""
        stack = [root]
        while stack:
            current = stack.pop()

            # Unreadable directories abort the walk, like any other fatal error
            with os.scandir(current) as it:
                entries = list(it)

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            files = []
            for e in entries:
                if e.is_dir(follow_symlinks=False):
                    dirs.append(Path(e.path))
                elif e.is_file():
                    files.append(Path(e.path))

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

            logging.debug(f"{current}: {len(files)} files, {len(dirs)} subdirectories")
            for f in files:
                yield f
