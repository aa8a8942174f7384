"""Local directory holding working copies and the run report."""

import shutil
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


class Workspace:
    """Directory layout for a run: one working copy per repository plus ``run.log``."""

    REPORT_FILENAME = "run.log"

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    @property
    def report_path(self) -> Path:
        return self.root / self.REPORT_FILENAME

    def reset(self) -> None:
        """Delete everything left by a previous run and recreate the root."""
        shutil.rmtree(self.root, ignore_errors=True)
        self.root.mkdir(parents=True, exist_ok=True)
        logger.debug("workspace_reset", root=str(self.root))

    def path_for(self, name: str) -> Path:
        """Working copy location for a repository."""
        return self.root / name
