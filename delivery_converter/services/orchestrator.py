from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import ConverterConfig
from ..excel.grid import SheetGrid
from ..excel.reader import (
    MissingColumnsError,
    SheetHeaderError,
    WorkbookReadError,
    read_excel_file,
    read_mapping_table,
)
from ..excel.writer import output_file_name, write_result_workbook
from ..logging.error_log import ErrorLogBuffer
from ..models.conversion_result import ConversionResult, RunSummary
from ..models.error_record import (
    MAPPING_COLUMNS_MISSING,
    OUTPUT_WRITE_ERROR,
    SHEET_HEADER_ERROR,
    WORKBOOK_READ_ERROR,
    ErrorRecord,
)
from ..models.records import MappingEntry
from .backends import (
    BackendUnavailableError,
    ConversionSettings,
    ReferenceBackend,
    VectorizedBackend,
    get_backend,
)
from .date_resolver import WEEKDAY_LABELS
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

"""Conversion orchestration.

One run:
1. acquire both inputs (async, the two workbooks are read concurrently)
2. run the selected backend (auto: vectorized, falling back to reference)
3. write the result workbook next to the origin file (or output_directory)
4. flush the error log and return RunSummary

Unreadable inputs abort the run before any output file is written.
ConversionSession gates the trigger: both inputs must be selected and only one
conversion may be in flight.
"""

__all__ = [
    "ConversionError",
    "ConversionNotReadyError",
    "ConversionBusyError",
    "RunContext",
    "LoadedInputs",
    "acquire_inputs",
    "compute_result",
    "run_conversion",
    "convert_files",
    "ConversionSession",
]


class ConversionError(Exception):
    """Fatal error for the whole run (no output is produced).

    ``error_type`` / ``file`` are what the error log records for the failure.
    """

    def __init__(self, message: str, error_type: str = WORKBOOK_READ_ERROR, file: str | None = None) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.file = file


class ConversionNotReadyError(ConversionError):
    """Raised when a conversion is triggered before both inputs are selected."""


class ConversionBusyError(ConversionError):
    """Raised when a conversion is triggered while another one is running."""


@dataclass(frozen=True)
class RunContext:
    """Explicit per-run inputs, passed through every step of a conversion."""
    origin_path: Path
    mapping_path: Path
    config: ConverterConfig
    backend: str = "auto"  # auto | reference | vectorized
    output_directory: Path | None = None

    @property
    def settings(self) -> ConversionSettings:
        return ConversionSettings(
            default_date=self.config.default_date,
            max_products=self.config.max_products,
        )

    def output_path(self) -> Path:
        directory = self.output_directory or self.origin_path.parent
        return directory / output_file_name(self.origin_path.name)


@dataclass(frozen=True)
class LoadedInputs:
    origin_name: str
    sheets: dict[str, SheetGrid]
    mapping: dict[str, MappingEntry]


def _read_origin(ctx: RunContext) -> dict[str, SheetGrid]:
    try:
        return read_excel_file(ctx.origin_path, WEEKDAY_LABELS, ctx.config.keep_na_strings)
    except WorkbookReadError as e:
        raise ConversionError(str(e), WORKBOOK_READ_ERROR, ctx.origin_path.name) from e


def _read_mapping(ctx: RunContext) -> dict[str, MappingEntry]:
    name = ctx.mapping_path.name
    try:
        return read_mapping_table(ctx.mapping_path, ctx.config.keep_na_strings)
    except WorkbookReadError as e:
        raise ConversionError(str(e), WORKBOOK_READ_ERROR, name) from e
    except SheetHeaderError as e:
        raise ConversionError(str(e), SHEET_HEADER_ERROR, name) from e
    except MissingColumnsError as e:
        raise ConversionError(str(e), MAPPING_COLUMNS_MISSING, name) from e


async def acquire_inputs(ctx: RunContext) -> LoadedInputs:
    """Read the origin weekday sheets and the mapping table.

    Raises:
        ConversionError: either workbook is unreadable or the mapping sheet is malformed
    """
    sheets, mapping = await asyncio.gather(
        asyncio.to_thread(_read_origin, ctx),
        asyncio.to_thread(_read_mapping, ctx),
    )
    logger.info(
        "loaded origin=%s weekday_sheets=%s mapping_entries=%d",
        ctx.origin_path.name,
        list(sheets.keys()),
        len(mapping),
    )
    return LoadedInputs(origin_name=ctx.origin_path.name, sheets=sheets, mapping=mapping)


def compute_result(
    inputs: LoadedInputs,
    backend: str = "auto",
    settings: ConversionSettings | None = None,
) -> ConversionResult:
    """Run the conversion, falling back to the reference backend when needed."""
    settings = settings or ConversionSettings()
    if backend == "auto":
        selected: ReferenceBackend = VectorizedBackend()
    else:
        try:
            selected = get_backend(backend)
        except ValueError as e:
            raise ConversionError(str(e)) from e

    present = [name for name in settings.weekday_labels if name in inputs.sheets]
    with ProgressTracker(len(present)) as progress:
        try:
            return selected.convert(inputs.sheets, inputs.mapping, inputs.origin_name, settings, progress)
        except BackendUnavailableError as e:
            logger.info(f"{selected.name} backend unavailable -> fallback to reference: {e}")
            return ReferenceBackend().convert(inputs.sheets, inputs.mapping, inputs.origin_name, settings, progress)


def _log_fatal(error_log: ErrorLogBuffer, error: ConversionError, file_name: str) -> None:
    error_log.append(ErrorRecord.for_file(error.file or file_name, error.error_type, str(error)))
    # ログ書き出し失敗で元の ConversionError を上書きしない
    try:
        error_log.flush()
    except OSError as e:
        logger.warning(f"failed to write error log: {e}")


async def run_conversion(ctx: RunContext, error_log: ErrorLogBuffer | None = None) -> tuple[ConversionResult, RunSummary]:
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()

    try:
        inputs = await acquire_inputs(ctx)
    except ConversionError as e:
        _log_fatal(error_log, e, ctx.origin_path.name)
        raise

    result = compute_result(inputs, ctx.backend, ctx.settings)
    target = ctx.output_path()
    try:
        output_path = await asyncio.to_thread(write_result_workbook, result, target)
    except OSError as e:
        error = ConversionError(f"cannot write result workbook '{target}': {e}", OUTPUT_WRITE_ERROR, target.name)
        _log_fatal(error_log, error, target.name)
        raise error from e
    logger.info(f"wrote {output_path}")

    error_log.extend(ErrorRecord.for_mapping_failure(ctx.origin_path.name, f) for f in result.failure_events)
    if len(error_log):
        logger.debug(f"error log entries: {error_log.counts()}")
    # ログ書き出し失敗で変換結果を失敗扱いにしない
    try:
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log: {log_path}")
    except OSError as e:
        logger.warning(f"failed to write error log: {e}")

    end_time = datetime.now(UTC)
    summary = RunSummary(
        extracted_rows=len(result.records),
        processed_sheets=len(result.validation),
        mismatch_days=result.mismatch_days,
        mapping_failures=len(result.mapping_failures),
        backend=result.backend,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        output_path=output_path,
    )
    return result, summary


def convert_files(ctx: RunContext) -> tuple[ConversionResult, RunSummary]:
    """Synchronous entry point around run_conversion()."""
    return asyncio.run(run_conversion(ctx))


class ConversionSession:
    """Holds the two selected inputs and gates conversion runs.

    Conversion is refused until both the origin and the mapping workbook are
    selected, and while another conversion of this session is in flight.
    """

    def __init__(self, config: ConverterConfig | None = None, *, backend: str = "auto",
                 output_directory: Path | None = None) -> None:
        self.config = config or ConverterConfig()
        self.backend = backend
        self.output_directory = output_directory
        self._origin: Path | None = None
        self._mapping: Path | None = None
        # convert_sync() は呼び出しごとに別イベントループ (別スレッドもあり) で走る
        self._running = threading.Lock()

    def select_origin(self, path: Path | None) -> None:
        self._origin = path

    def select_mapping(self, path: Path | None) -> None:
        self._mapping = path

    @property
    def ready(self) -> bool:
        return self._origin is not None and self._mapping is not None

    @property
    def busy(self) -> bool:
        return self._running.locked()

    def _context(self) -> RunContext:
        if self._origin is None or self._mapping is None:
            raise ConversionNotReadyError("select both the origin and the mapping workbook first")
        return RunContext(
            origin_path=self._origin,
            mapping_path=self._mapping,
            config=self.config,
            backend=self.backend,
            output_directory=self.output_directory,
        )

    async def convert(self, error_log: ErrorLogBuffer | None = None) -> tuple[ConversionResult, RunSummary]:
        ctx = self._context()
        if not self._running.acquire(blocking=False):
            raise ConversionBusyError("a conversion is already running")
        try:
            return await run_conversion(ctx, error_log)
        finally:
            self._running.release()

    def convert_sync(self) -> tuple[ConversionResult, RunSummary]:
        return asyncio.run(self.convert())
