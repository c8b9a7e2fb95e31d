"""Concurrent streaming precompression engine.

Each (file, codec) pair is an independent job writing its own sibling
path, so jobs fan out without locks. Jobs stream through a temporary
file that is renamed into place only after the compressor is finished
and the file is closed. A failed job never leaves an output behind and
never cancels its siblings; failures are returned in the report.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import BinaryIO, Iterable

from compress.compressors import CODEC_ERRORS, create_compressor
from compress.discovery import discover_eligible_files, schedule_jobs
from core.constants import COMPRESS_CHUNK_SIZE, COMPRESS_TEMP_SUFFIX, DEFAULT_MAX_CONCURRENCY
from core.errors import AdapterCompressionError
from core.logging_config import get_logger
from core.types import (
    CompressionJob,
    CompressionJobResult,
    CompressionOptions,
    CompressionReport,
    JobState,
)

_LOGGER = get_logger(__name__)


async def precompress_directory(
    root: Path,
    options: CompressionOptions,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> CompressionReport:
    """Compress every eligible file under ``root`` with enabled codecs.

    Args:
        root: Asset directory. A missing directory is a no-op.
        options: Codec selection and eligible extensions.
        max_concurrency: Upper bound of jobs in flight.

    Returns:
        Report of all settled jobs.

    Raises:
        AdapterCompressionError: If ``max_concurrency`` is not positive.
    """
    if max_concurrency < 1:
        raise AdapterCompressionError(
            f"Precompression concurrency must be at least 1, got {max_concurrency}."
        )
    if not root.is_dir():
        _LOGGER.info("compression_skipped", directory=str(root), reason="directory not found")
        return CompressionReport(directory=root, skipped=True)
    files = discover_eligible_files(root, options.extensions)
    jobs = schedule_jobs(files, options.enabled_codecs)
    semaphore = asyncio.Semaphore(max_concurrency)
    outcomes = await asyncio.gather(
        *(_run_bounded(job, semaphore) for job in jobs),
        return_exceptions=True,
    )
    results = tuple(_settle(job, outcome) for job, outcome in zip(jobs, outcomes))
    report = CompressionReport(directory=root, results=results)
    _log_report(report, len(files))
    return report


async def precompress_directories(
    roots: Iterable[Path],
    options: CompressionOptions,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> list[CompressionReport]:
    """Precompress directories one after another.

    Each directory's job set runs concurrently; directories do not overlap.
    """
    reports: list[CompressionReport] = []
    for root in roots:
        reports.append(await precompress_directory(root, options, max_concurrency))
    return reports


def compress_tree(
    root: Path,
    options: CompressionOptions,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> CompressionReport:
    """Run ``precompress_directory`` from synchronous code."""
    return asyncio.run(precompress_directory(root, options, max_concurrency))


def run_compression_job(
    job: CompressionJob,
    chunk_size: int = COMPRESS_CHUNK_SIZE,
) -> CompressionJobResult:
    """Stream one source file through its codec into a sibling file.

    Args:
        job: File and codec to process.
        chunk_size: Bytes read per streaming step.

    Returns:
        COMPLETED result, or FAILED with the state and error that ended it.

    Raises:
        Exception: Unexpected errors propagate after partial output is removed.
    """
    output_path = job.output_path
    temp_path = output_path.with_name(output_path.name + COMPRESS_TEMP_SUFFIX)
    state = JobState.READING
    try:
        size_hint = job.source_path.stat().st_size
        compressor = create_compressor(job.codec, size_hint)
        with _open_source(job.source_path) as source, temp_path.open("wb") as destination:
            while True:
                state = JobState.READING
                chunk = source.read(chunk_size)
                if not chunk:
                    break
                state = JobState.COMPRESSING
                payload = compressor.compress(chunk)
                state = JobState.WRITING
                destination.write(payload)
            state = JobState.COMPRESSING
            payload = compressor.finish()
            state = JobState.WRITING
            destination.write(payload)
            destination.flush()
        os.replace(temp_path, output_path)
    except (OSError, *CODEC_ERRORS) as error:
        _discard(temp_path)
        _discard(output_path)
        return CompressionJobResult(
            job=job,
            state=JobState.FAILED,
            error=f"failed while {state.value}: {error}",
        )
    except BaseException:
        _discard(temp_path)
        _discard(output_path)
        raise
    return CompressionJobResult(job=job, state=JobState.COMPLETED)


def _open_source(path: Path) -> BinaryIO:
    return path.open("rb")


async def _run_bounded(job: CompressionJob, semaphore: asyncio.Semaphore) -> CompressionJobResult:
    async with semaphore:
        return await asyncio.to_thread(run_compression_job, job)


def _settle(
    job: CompressionJob,
    outcome: CompressionJobResult | BaseException,
) -> CompressionJobResult:
    if isinstance(outcome, CompressionJobResult):
        return outcome
    if not isinstance(outcome, Exception):
        raise outcome
    return CompressionJobResult(job=job, state=JobState.FAILED, error=repr(outcome))


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as error:
        _LOGGER.warning("compression_cleanup_failed", path=str(path), error=str(error))


def _log_report(report: CompressionReport, file_count: int) -> None:
    for failure in report.failures:
        _LOGGER.warning(
            "compression_job_failed",
            path=str(failure.job.source_path),
            codec=failure.job.codec.value,
            error=failure.error,
        )
    _LOGGER.info(
        "compression_directory_completed",
        directory=str(report.directory),
        file_count=file_count,
        job_count=report.job_count,
        completed_count=len(report.completed),
        failed_count=len(report.failures),
    )
