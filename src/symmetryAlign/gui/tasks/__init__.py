"""Background worker helpers for GUI tasks."""

from .export_worker import ExportSignals, ExportWorker

__all__ = ["ExportSignals", "ExportWorker"]
