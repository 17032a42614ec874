"""Removal of plan files left in working directories."""

from __future__ import annotations

import os
from typing import Sequence

from stackplan.core.errors import CleanupError


def cleanup_plan_files(paths: Sequence[str], plan_file: str) -> None:
    """
    Remove ``plan_file`` from each directory in ``paths``, in order.

    Does nothing when ``plan_file`` is empty. Stops at the first failed
    removal; later directories are not attempted.

    Raises:
        CleanupError: For the first file that could not be removed
    """
    if not plan_file:
        return

    for path in paths:
        target = os.path.join(path, plan_file)
        try:
            os.remove(target)
        except OSError as e:
            raise CleanupError(
                f"Failed to remove plan file: {e}",
                path=target,
                details={"path": target},
            ) from e
