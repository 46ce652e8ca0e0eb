"""Tool-calling helpers around the edit engine."""

from .diff_summary import ChangeStats, change_stats, describe_change
from .file_tools import EditFileResult, FileWorkspace, ReadFileResult, WriteFilesResult

__all__ = [
    "ChangeStats",
    "EditFileResult",
    "FileWorkspace",
    "ReadFileResult",
    "WriteFilesResult",
    "change_stats",
    "describe_change",
]
