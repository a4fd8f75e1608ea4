from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import BACKEND_CHOICES, ConfigError, ConverterConfig, load_config
from ..logging.init import enable_debug, log_summary, setup_logging
from ..services.orchestrator import ConversionError, ConversionSession
from ..services.summary import render_summary_line

"""CLI entrypoint.

    delivery-converter ORIGIN MAPPING [--config PATH] [--output-dir DIR]
                       [--backend auto|reference|vectorized] [--debug]

Backend priority: --backend > DELIVERY_CONVERTER_BACKEND (.env / environment)
> config ``backend`` > auto.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_MISMATCH = 2

DEFAULT_CONFIG_PATH = Path("config/convert.yml")
BACKEND_ENV = "DELIVERY_CONVERTER_BACKEND"


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; failures only produce a warning."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="delivery-converter",
        description="Weekly delivery workbook -> store/product dataset converter",
    )
    p.add_argument("origin", type=Path, help="Weekly origin workbook (weekday sheets 월~금)")
    p.add_argument("mapping", type=Path, help="Store mapping workbook (원본 사업장명 / 코드 / 사업장명)")
    p.add_argument("--config", type=Path, default=None, help=f"YAML config (default: {DEFAULT_CONFIG_PATH} if present)")
    p.add_argument("--output-dir", type=Path, default=None, help="Directory for the result workbook")
    p.add_argument("--backend", choices=BACKEND_CHOICES, default=None, help="Execution backend")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _resolve_config(config_path: Path | None) -> ConverterConfig:
    if config_path is not None:
        return load_config(config_path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return ConverterConfig()


def _resolve_backend(args: argparse.Namespace, cfg: ConverterConfig) -> str:
    if args.backend:
        return args.backend
    env_backend = os.getenv(BACKEND_ENV)
    if env_backend:
        if env_backend not in BACKEND_CHOICES:
            raise ConfigError(f"{BACKEND_ENV} must be one of {list(BACKEND_CHOICES)}: {env_backend}")
        return env_backend
    return cfg.backend


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む ([] はテスト用にそのまま使う)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        enable_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args.config)
        backend = _resolve_backend(args, cfg)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    output_dir = args.output_dir or (Path(cfg.output_directory) if cfg.output_directory else None)
    session = ConversionSession(cfg, backend=backend, output_directory=output_dir)
    session.select_origin(args.origin)
    session.select_mapping(args.mapping)

    try:
        result, summary = session.convert_sync()
    except ConversionError as e:
        logger.error(f"conversion failed: {e}")
        return EXIT_FATAL

    for row in result.validation:
        logger.info(
            f"validation {row.date} {row.day_name} extracted={row.extracted_sum} "
            f"store_sum={row.original_store_sum} total={row.original_total} result={row.match_result.label}"
        )
    if result.mapping_failures:
        logger.warning(f"mapping failures: {', '.join(result.mapping_failures)}")

    logger.info(f"converted rows={summary.extracted_rows} elapsed_sec={summary.elapsed_seconds:.2f} mode={summary.backend}")
    # log_summary が "SUMMARY " を付けるので本文のみ渡す
    log_summary(render_summary_line(summary)[len("SUMMARY "):])

    if summary.mismatch_days > 0:
        return EXIT_MISMATCH
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
