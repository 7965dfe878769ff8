# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Streaming record writers for jsonl, json and csv output.

Writers emit each record as soon as it is written, so a job never holds more
than one page in memory. Framing (the json array brackets, the csv header) is
tracked per writer instance, which makes batch boundaries invisible in the
output.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, List, Optional, Union

from ..core.errors import OutputError, UserInputError
from ..core.types import Record
from ..fields import FieldResolver, csv_row

EXPORT_FORMATS = ("jsonl", "json", "csv")


class RecordWriter(ABC):
    """
    Base writer over a text stream.

    ``close(complete=False)`` skips the closing framing, leaving whatever was
    already written on disk as-is.
    """

    def __init__(self, stream: IO[str], close_stream: bool = True):
        self.stream = stream
        self.close_stream = close_stream
        self.records_written = 0
        self._closed = False

    def begin(self) -> None:
        pass

    @abstractmethod
    def write(self, record: Record) -> None:
        pass

    def finish(self) -> None:
        pass

    def close(self, complete: bool = True) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            try:
                if complete:
                    self.finish()
                self.stream.flush()
            finally:
                if self.close_stream:
                    self.stream.close()
        except OSError as e:
            raise self._output_error(e) from None

    def _emit(self, text: str) -> None:
        try:
            self.stream.write(text)
        except OSError as e:
            raise self._output_error(e) from None

    def _output_error(self, error: OSError) -> OutputError:
        name = getattr(self.stream, "name", None) or "export output"
        return OutputError(f"Could not write {name}: {error.strerror or error}")


class JsonlWriter(RecordWriter):
    def write(self, record: Record) -> None:
        self._emit(json.dumps(record, ensure_ascii=False) + "\n")
        self.records_written += 1


class JsonArrayWriter(RecordWriter):
    """Pretty-printed JSON array; the first-record flag spans the whole job."""

    def begin(self) -> None:
        self._emit("[\n")

    def write(self, record: Record) -> None:
        if self.records_written:
            self._emit(",\n")
        self._emit(json.dumps(record, indent=2, ensure_ascii=False))
        self.records_written += 1

    def finish(self) -> None:
        self._emit("\n]\n")


class CsvWriter(RecordWriter):
    def __init__(
        self,
        stream: IO[str],
        fields: List[str],
        resolver: FieldResolver,
        close_stream: bool = True,
    ):
        super().__init__(stream, close_stream=close_stream)
        self.fields = list(fields)
        self.resolver = resolver

    def begin(self) -> None:
        self._emit(csv_row(self.fields) + "\n")

    def write(self, record: Record) -> None:
        values = [self.resolver(record, name) for name in self.fields]
        self._emit(csv_row(values) + "\n")
        self.records_written += 1


def create_writer(
    fmt: str,
    stream: IO[str],
    fields: Optional[List[str]] = None,
    resolver: Optional[FieldResolver] = None,
    close_stream: bool = True,
) -> RecordWriter:
    """
    Build and begin a writer for ``fmt``.

    Raises:
        UserInputError: For an unknown format, or csv without fields
    """
    if fmt == "jsonl":
        writer: RecordWriter = JsonlWriter(stream, close_stream=close_stream)
    elif fmt == "json":
        writer = JsonArrayWriter(stream, close_stream=close_stream)
    elif fmt == "csv":
        if not fields or resolver is None:
            raise UserInputError("CSV output needs a field list")
        writer = CsvWriter(stream, fields, resolver, close_stream=close_stream)
    else:
        raise UserInputError(
            f"Unknown export format '{fmt}'. Use one of: {', '.join(EXPORT_FORMATS)}"
        )
    writer.begin()
    return writer


def open_export_file(path: Union[str, Path]) -> IO[str]:
    """
    Open an export destination for writing.

    ``newline=""`` keeps the writers' own line endings byte-exact on every
    platform.

    Raises:
        OutputError: If the file cannot be created (missing directory,
            permissions...)
    """
    try:
        return open(path, "w", encoding="utf-8", newline="")
    except OSError as e:
        raise OutputError(f"Could not write {path}: {e.strerror or e}") from None
