"""
runner.py

vital2csv runner (vital-log SQLite -> per-signal CSV with interpolated timestamps).

Pipeline, once per signal, both signals concurrently:
  record source -> (x/y/z assembly, ACCEL only) -> batch grouping
    -> timestamp interpolation -> CSV

Export both signals into the current directory:
python runner.py VitalgramLogData.sqlite

Export into another directory:
python runner.py -d output VitalgramLogData.sqlite

Also emit the last batch of each signal (zero-width interpolation):
python runner.py --flush-final -d output VitalgramLogData.sqlite
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import tzinfo
from pathlib import Path
from typing import Any, Sequence

from contracts.errors import AccessError, ExportError
from contracts.signals import SignalType
from infra.config import ValidationError, get_settings, resolve_timezone
from infra.logging_config import setup_logging
from infra.pipeline_paths import OutputPaths
from pipeline.record_source import VitalRecordSource
from pipeline.run_manifest import RunManifest, write_manifest
from pipeline.stream import StreamStats, run_stream
from version import CSV_FORMAT_VERSION, ENGINE_NAME, ENGINE_VERSION

logger = logging.getLogger("runner")

# Worker order; one worker per entry.
SIGNALS: tuple[SignalType, ...] = (SignalType.ECG, SignalType.ACCEL)

EXIT_OK = 0
EXIT_FAILED = 1


@dataclass(frozen=True)
class ExportJob:
    """Everything the coordinator needs for one run."""

    input_path: Path
    paths: OutputPaths
    flush_final: bool = False
    tz: tzinfo | None = None
    timezone_name: str | None = None
    write_manifest: bool = False


@dataclass
class RunResult:
    stats: dict[str, StreamStats] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def exit_code(self) -> int:
        return EXIT_OK if self.ok else EXIT_FAILED


def _collect(signal: SignalType, fut: Future[StreamStats], result: RunResult) -> None:
    exc = fut.exception()
    if exc is None:
        result.stats[signal.name] = fut.result()
        return

    if isinstance(exc, ExportError):
        message = exc.describe()
        logger.error("%s stream failed: %s", signal.name, message)
    else:
        message = f"{type(exc).__name__}: {exc}"
        logger.error("%s stream failed unexpectedly: %s", signal.name, message, exc_info=exc)
    result.errors[signal.name] = message


def run_export(job: ExportJob, *, signals: Sequence[SignalType] = SIGNALS) -> RunResult:
    """
    Run one stream per signal concurrently and wait for all of them.

    A failing stream never cancels its siblings: every worker runs to
    completion (or to its own first error) before this returns, and each one
    closes its own output file. Raises :class:`AccessError` if the input
    database or the output directory cannot be opened.
    """
    source = VitalRecordSource.open(job.input_path)
    try:
        job.paths.ensure_out_dir()
    except OSError as exc:
        raise AccessError(f"{job.paths.out_dir}: {exc}") from exc

    result = RunResult()
    futures: dict[SignalType, Future[StreamStats]] = {}
    with ThreadPoolExecutor(max_workers=len(signals), thread_name_prefix="stream") as pool:
        for signal in signals:
            futures[signal] = pool.submit(
                run_stream,
                signal,
                source,
                job.paths.for_signal(signal),
                flush_final=job.flush_final,
                tz=job.tz,
            )
    # Leaving the executor block joins every worker.

    for signal, fut in futures.items():
        _collect(signal, fut, result)
    return result


def build_manifest(job: ExportJob, result: RunResult) -> RunManifest:
    return RunManifest(
        input_path=str(job.input_path),
        ok=result.ok,
        flush_final_batch=job.flush_final,
        timezone=job.timezone_name,
        streams={name: st.to_dict() for name, st in result.stats.items()},
        errors=dict(result.errors),
    )


def _prog_name() -> str:
    return os.path.basename(sys.argv[0]) or ENGINE_NAME


def build_parser() -> argparse.ArgumentParser:
    prog = _prog_name()
    parser = argparse.ArgumentParser(
        prog=prog,
        usage=f"{prog} [options] vital_data",
        description="Export ECG and accelerometer signals from a vital-log SQLite file to CSV.",
    )
    parser.add_argument("vital_data", nargs="*", help="Path to the vital-log SQLite database")
    parser.add_argument(
        "-d",
        "--outDir",
        dest="out_dir",
        default=None,
        help="Output directory for csv data (default: VITAL2CSV_OUT_DIR or current directory)",
    )
    parser.add_argument(
        "--flush-final",
        action="store_true",
        default=None,
        help="Also write the last batch of each signal, with zero-width interpolation.",
    )
    parser.add_argument(
        "--tz",
        default=None,
        help="IANA time zone for the time columns (default: VITAL2CSV_TZ or local time)",
    )
    parser.add_argument(
        "--manifest",
        action="store_true",
        default=None,
        help="Write <input>.manifest.json next to the CSV files.",
    )
    parser.add_argument("--version", action="store_true", help="Print version information and exit.")
    return parser


def _resolve_job(args: argparse.Namespace) -> ExportJob:
    export_cfg = get_settings().export

    out_dir = args.out_dir if args.out_dir is not None else export_cfg.out_dir
    tz_flag = (args.tz or "").strip()
    tz_name = tz_flag or export_cfg.timezone
    tz = resolve_timezone(tz_flag) if tz_flag else export_cfg.zone()
    flush_final = export_cfg.flush_final_batch if args.flush_final is None else bool(args.flush_final)
    manifest = export_cfg.write_manifest if args.manifest is None else bool(args.manifest)

    input_path = Path(args.vital_data[0])
    return ExportJob(
        input_path=input_path,
        paths=OutputPaths.for_input(input_path, out_dir),
        flush_final=flush_final,
        tz=tz,
        timezone_name=tz_name,
        write_manifest=manifest,
    )


def _validation_summary(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"ENGINE_NAME={ENGINE_NAME}")
        print(f"ENGINE_VERSION={ENGINE_VERSION}")
        print(f"CSV_FORMAT_VERSION={CSV_FORMAT_VERSION}")
        return EXIT_OK

    if len(args.vital_data) != 1:
        parser.print_help(sys.stderr)
        return EXIT_OK

    try:
        get_settings(reload=True)
    except ValidationError as exc:
        print(f"Invalid configuration: {_validation_summary(exc)}", file=sys.stderr)
        return EXIT_FAILED

    setup_logging()

    if not Path(args.vital_data[0]).exists():
        logger.error("stat %s: no such file or directory", args.vital_data[0])
        return EXIT_FAILED

    try:
        job = _resolve_job(args)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return EXIT_FAILED

    try:
        result = run_export(job)
    except AccessError as exc:
        logger.error("%s", exc.describe())
        return EXIT_FAILED

    if job.write_manifest:
        path = write_manifest(job.paths.manifest(), build_manifest(job, result))
        logger.info("Wrote manifest %s", path)

    summary: dict[str, Any] = {name: st.rows_written for name, st in result.stats.items()}
    if result.ok:
        logger.info("Export complete: %s", summary)
    else:
        logger.error("Export failed for %s (completed: %s)", sorted(result.errors), summary)
    return result.exit_code


def cli() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    cli()
