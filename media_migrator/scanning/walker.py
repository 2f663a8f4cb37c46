import os
import logging
from pathlib import Path
from typing import Iterator, List

from ..exceptions import DiscoveryError


class TreeWalker:
    """
    Enumerates the regular files of an input tree.

    Hidden entries (leading dot) are skipped, whether files or directories.
    Symlinks are neither followed nor listed.
    """

    def walk(self, root: Path) -> List[Path]:
        """
        Returns every regular file under root in a stable depth-first order.
        Raises DiscoveryError if any directory cannot be listed.
        """
        files = list(self._iter_files(root))
        logging.debug(f"Discovered {len(files)} files under {root}")
        return files

    def _iter_files(self, root: Path) -> Iterator[Path]:
        """Depth-first walker using os.scandir, with an explicit stack."""
        stack = [root]
        while stack:
            current = stack.pop()

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as e:
                raise DiscoveryError(f"Cannot list directory {current}: {e}") from e

            # Sort for stable traversal order
            entries.sort(key=lambda e: (e.name.lower(), e.name))

            dirs = []
            files = []
            for e in entries:
                if e.name.startswith('.'):
                    continue
                # May lstat() when the directory entry carries no type
                try:
                    is_dir = e.is_dir(follow_symlinks=False)
                    is_file = not is_dir and e.is_file(follow_symlinks=False)
                except OSError as err:
                    raise DiscoveryError(f"Cannot inspect {e.path}: {err}") from err

                if is_dir:
                    dirs.append(Path(e.path))
                elif is_file:
                    files.append(Path(e.path))

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

            for f in files:
                yield f
