"""Worker that runs the full-resolution export on a background thread."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QObject, QRunnable, Signal

from ...editor import ExportJob
from ...io.output_sink import save_raster
from ...utils.logging import get_logger

logger = get_logger()


class ExportSignals(QObject):
    """Signals emitted by :class:`ExportWorker`."""

    finished = Signal(str, int)
    """Emitted with the written file path and the job identifier."""

    error = Signal(int, str)
    """Emitted if the export pass or the write fails."""

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)


class ExportWorker(QRunnable):
    """Apply the snapshotted curves and write the result in a :class:`QThreadPool`.

    *fmt* forces the encoder; otherwise the destination suffix decides and
    the job's configured export format covers unknown suffixes.
    """

    def __init__(
        self,
        job: ExportJob,
        destination: Path,
        *,
        job_id: int,
        fmt: str | None = None,
    ) -> None:
        super().__init__()
        self.setAutoDelete(True)
        self._job = job
        self._destination = Path(destination)
        self._job_id = job_id
        self._fmt = fmt
        self.signals = ExportSignals()

    @property
    def job(self) -> ExportJob:
        return self._job

    def run(self) -> None:  # type: ignore[override]
        """Render and save the export, then notify listeners."""

        try:
            result = self._job.render()
            path = save_raster(
                result, self._destination, self._fmt, default_fmt=self._job.export_format
            )
        except Exception as exc:
            logger.exception("Export %d failed", self._job_id)
            self.signals.error.emit(self._job_id, str(exc))
            return
        self.signals.finished.emit(str(path), self._job_id)


__all__ = ["ExportSignals", "ExportWorker"]
