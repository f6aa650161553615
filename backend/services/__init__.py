"""Backend services for the training plan mapper."""

from backend.services.export_queue import ExportJob, ExportJobStatus, ExportQueue

__all__ = [
    "ExportQueue",
    "ExportJob",
    "ExportJobStatus",
]
