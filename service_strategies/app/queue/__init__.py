"""Write-behind buffering."""

from .write_behind import FlushReport, PendingWrite, WriteBehindQueue, WriteOperation

__all__ = ["FlushReport", "PendingWrite", "WriteBehindQueue", "WriteOperation"]
