from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config, validate_thresholds
from ..excel.reader import SheetDecodeError, read_sheet
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import AppConfig, Thresholds
from ..models.delivery import DispatchResult
from ..notify.channels import DeliveryError, build_channels
from ..notify.dispatch import build_requests, dispatch
from ..render.cards import export_candidates_csv, render_card_text, render_cards_html
from ..services.orchestrator import (
    ASSESSMENT,
    ATTENDANCE,
    CHAPTERS,
    SOURCE_LABELS,
    ProcessingError,
    process_all,
)
from ..services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env, then config (YAML + schema)
- Resolve thresholds (flags override config) and the three source paths
- Decode + merge, print one card per candidate
- Optionally export HTML / CSV and dispatch notifications
- Log the SUMMARY line and return an exit code
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

CHANNEL_NAMES = ("email", "whatsapp")


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv (values override the process environment)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_channels(value: str) -> list[str]:
    names = [v.strip().lower() for v in value.split(",") if v.strip()]
    unknown = [n for n in names if n not in CHANNEL_NAMES]
    if unknown or not names:
        raise argparse.ArgumentTypeError(
            f"unknown channel(s): {', '.join(unknown) or value!r} (choose from {', '.join(CHANNEL_NAMES)})"
        )
    return names


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="learner-report",
        description="Join chapter-completion, assessment and OCS attendance sheets into report cards",
    )
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument("--chapters", type=Path, help="Sheet 1: chapter completion export")
    p.add_argument("--assessment", type=Path, help="Sheet 2: monthly assessment export")
    p.add_argument("--attendance", type=Path, help="Sheet 3: OCS attendance export")
    p.add_argument("--no-progress-max", type=int, help='"No Progress" ends at this chapter count')
    p.add_argument("--in-progress-max", type=int, help='"In Progress" ends at this chapter count')
    p.add_argument("--ocs1-date", help="OCS 1 session date shown on cards and messages")
    p.add_argument("--ocs2-date", help="OCS 2 session date shown on cards and messages")
    p.add_argument("--html", type=Path, help="Write the cards as an HTML page")
    p.add_argument("--csv", type=Path, help="Write the candidate list as CSV")
    p.add_argument("--send", type=_parse_channels, default=[], help="Channels to notify: email,whatsapp")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet headers & first rows then exit")
    return p.parse_args(argv)


def _resolve_thresholds(args: argparse.Namespace, cfg: AppConfig) -> Thresholds:
    if args.no_progress_max is None and args.in_progress_max is None:
        return cfg.thresholds
    return validate_thresholds(
        args.no_progress_max if args.no_progress_max is not None else cfg.thresholds.no_progress_max,
        args.in_progress_max if args.in_progress_max is not None else cfg.thresholds.in_progress_max,
    )


def _resolve_paths(args: argparse.Namespace, cfg: AppConfig) -> dict[str, Path | None]:
    configured = {
        CHAPTERS: cfg.sources.chapters,
        ASSESSMENT: cfg.sources.assessment,
        ATTENDANCE: cfg.sources.attendance,
    }
    paths: dict[str, Path | None] = {}
    for label in SOURCE_LABELS:
        given = getattr(args, label)
        if given is not None:
            paths[label] = given
        elif configured[label]:
            paths[label] = Path(configured[label])
        else:
            paths[label] = None
    return paths


def _output_path(path: Path, cfg: AppConfig) -> Path:
    return path if path.is_absolute() else Path(cfg.report.output_directory) / path


def _inspect_data(paths: dict[str, Path | None]) -> int:
    for label, path in paths.items():
        if path is None:
            print(f"{label}: not supplied")
            continue
        print(f"{label.upper()}: {path.name}")
        try:
            sheet = read_sheet(path)
        except SheetDecodeError as e:
            print(f"  read_error: {e}")
            continue
        print(f"  SHEET: {sheet.sheet_name} cols={sheet.columns} rows={len(sheet.rows)}")
        print("    sample_rows=", [dict(r.values) for r in sheet.rows[:3]])
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # 空リスト [] (テスト) と None を区別: None のときのみ sys.argv を読む
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(True)
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
        thresholds = _resolve_thresholds(args, cfg)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    paths = _resolve_paths(args, cfg)
    if args.inspect_data:
        return _inspect_data(paths)

    missing = [label for label, p in paths.items() if p is None]
    if missing:
        logger.error(f"missing source file(s): {', '.join(missing)}")
        return EXIT_FATAL

    logger.info(
        f"thresholds: no_progress_max={thresholds.no_progress_max} in_progress_max={thresholds.in_progress_max}"
    )

    error_log = ErrorLogBuffer()
    try:
        result = process_all(paths, thresholds, error_log)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    for label, message in result.source_errors.items():
        logger.error(f"{label}: {message}")
    for label in result.awaiting_sources:
        if label not in result.source_errors:
            logger.warning(f"{label}: no data rows")
    if result.error:
        logger.error(result.error)
    if result.empty_join:
        logger.warning(result.messages[-1])

    for candidate in result.candidates:
        print(render_card_text(candidate, args.ocs1_date, args.ocs2_date))
        print()

    if args.html is not None:
        out = _output_path(args.html, cfg)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(render_cards_html(result.candidates, args.ocs1_date, args.ocs2_date), encoding="utf-8")
        logger.info(f"html: {out}")
    if args.csv is not None:
        out = export_candidates_csv(result.candidates, _output_path(args.csv, cfg))
        logger.info(f"csv: {out}")

    delivery: DispatchResult | None = None
    if args.send and result.candidates:
        try:
            channels = build_channels(args.send, cfg.report, cfg.email, cfg.whatsapp)
        except DeliveryError as e:
            logger.error(f"notify: {e}")
            return EXIT_FATAL
        requests = build_requests(result.candidates, args.ocs1_date, args.ocs2_date)
        delivery = dispatch(requests, channels, error_log)
        for record in delivery.records:
            if not record.success:
                logger.error(f"{record.channel}: {record.message}")

    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"error log: {log_path}")

    log_summary(render_summary_line(result, delivery)[len("SUMMARY "):])

    if result.awaiting_sources or result.error or result.empty_join:
        return EXIT_PARTIAL_FAILURE
    if delivery is not None and delivery.failed > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
