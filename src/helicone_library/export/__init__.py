# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

from .engine import ExportEngine, ExportProgress, ExportResult
from .sources import RecordSource, RequestSource, SessionSource
from .writers import EXPORT_FORMATS, create_writer, open_export_file

__all__ = [
    "EXPORT_FORMATS",
    "ExportEngine",
    "ExportProgress",
    "ExportResult",
    "RecordSource",
    "RequestSource",
    "SessionSource",
    "create_writer",
    "open_export_file",
]
