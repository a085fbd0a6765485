"""Copying skill trees into place.

``copy_tree`` reproduces a skill directory without its ``.git`` metadata,
recreating symbolic links instead of following them. Any failure aborts
the copy and names the entry that failed.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from paks.errors import MaterializeError

logger = logging.getLogger(__name__)

_VCS_DIR = ".git"


def copy_tree(source: Path, dest: Path) -> None:
    """Recursively copy ``source`` into ``dest``.

    - ``dest`` (and missing parents) is created.
    - Directories named ``.git`` are skipped at every depth.
    - Regular files are copied byte-for-byte (with permission bits).
    - Symlinks are recreated pointing at the same target, not dereferenced.

    Raises:
        MaterializeError: On the first entry that cannot be copied.
    """
    try:
        dest.mkdir(parents=True, exist_ok=True)
        entries = sorted(os.scandir(source), key=lambda e: e.name)
    except OSError as exc:
        raise MaterializeError(
            f"Failed to copy {source} to {dest}: {exc}",
            cause=exc,
            path=source,
        ) from exc

    for entry in entries:
        src = Path(entry.path)
        dst = dest / entry.name
        try:
            if entry.is_symlink():
                target = os.readlink(src)
                os.symlink(target, dst, target_is_directory=src.is_dir())
            elif entry.is_dir():
                if entry.name == _VCS_DIR:
                    continue
                copy_tree(src, dst)
            else:
                shutil.copy2(src, dst, follow_symlinks=False)
        except MaterializeError:
            raise
        except OSError as exc:
            raise MaterializeError(
                f"Failed to copy {src}: {exc}",
                cause=exc,
                path=src,
            ) from exc


def remove_tree(path: Path) -> None:
    """Remove an installed skill: a directory tree, a file, or a symlink.

    Raises:
        MaterializeError: If removal fails.
    """
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        else:
            shutil.rmtree(path)
    except OSError as exc:
        raise MaterializeError(f"Failed to remove {path}: {exc}", cause=exc, path=path) from exc
    logger.debug("Removed %s", path)
