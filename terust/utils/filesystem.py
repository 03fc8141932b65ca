# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Filesystem helpers for build artifacts.

Both helpers are idempotent: deleting something that is already gone is not
an error. Deleting something that is there and won't go away is, and the
OSError is left for the caller to classify.
"""

import shutil
from pathlib import Path


def safe_delete(file_path: Path) -> bool:
    """
    Delete a file if it exists. Returns whether anything was actually deleted.

    This never throws on a missing file, that's the "safe" part.

    Raises:
        OSError: If the file exists but can't be deleted (permissions, etc).
    """
    try:
        file_path.unlink()
    except FileNotFoundError:
        return False
    return True


def remove_tree(directory: Path) -> bool:
    """
    Remove a directory and everything in it, if it exists.

    Returns:
        True if the directory existed and was removed, False if it didn't exist.

    Raises:
        OSError: If the directory exists but can't be removed completely.
    """
    if not directory.exists():
        return False
    shutil.rmtree(directory)
    return True
