"""
Output path locking for crosskit.

Two crosskit processes writing the same output path would overwrite each
other's artifact mid-build. OutputLock serializes them with a
cross-process file lock from the `filelock` library. Lock files live in
the user cache directory, keyed by a hash of the resolved output path, so
nothing is created next to the output.

Usage:
    from crosskit.core.locking import LockManager

    with LockManager().output_lock(Path("build/hello")):
        orchestrator.compile(config)
"""

import hashlib
import logging
import platform
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout as FileLockTimeout

from crosskit.core.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)


def get_global_cache_dir() -> Path:
    """Get the per-user crosskit cache directory."""
    if platform.system() == "Windows":
        return Path.home() / "AppData" / "Local" / "crosskit"
    return Path.home() / ".crosskit"


class LockManager:
    """
    Manages output-path locks.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Optional[Path] = None):
        """
        Initialize lock manager.

        Args:
            lock_dir: Directory for lock files (default: global cache/lock/)
        """
        if lock_dir is None:
            lock_dir = get_global_cache_dir() / "lock"

        self.lock_dir = Path(lock_dir)
        self.lock_dir.mkdir(parents=True, exist_ok=True)

    def lock_path_for(self, output: Path) -> Path:
        digest = hashlib.sha256(str(Path(output).resolve()).encode()).hexdigest()
        return self.lock_dir / f"output-{digest[:16]}.lock"

    @contextmanager
    def output_lock(self, output: Path, timeout: float = 300):
        """
        Acquire the lock for an output path.

        Args:
            output: Output path about to be written
            timeout: Maximum wait time in seconds (default: 300)

        Raises:
            LockTimeoutError: If lock can't be acquired within timeout
        """
        lock_path = self.lock_path_for(output)
        lock = FileLock(lock_path, timeout=timeout)

        try:
            with lock:
                logger.debug(f"Acquired output lock for {output}: {lock_path}")
                yield
                logger.debug(f"Released output lock for {output}")
        except FileLockTimeout as e:
            raise LockTimeoutError(
                f"Could not acquire lock for {output} after {timeout}s. "
                "Another crosskit process may be writing the same output."
            ) from e
