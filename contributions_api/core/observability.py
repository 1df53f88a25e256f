import sys
from pathlib import Path

import sentry_sdk
from loguru import logger

from contributions_api.settings import Settings

ACCESS_LOG_FILE = "access_{time:YYYY-MM}.log"


def _is_access_record(record) -> bool:
    return bool(record["extra"].get("access"))


def _stderr_filter(record) -> bool:
    # Access records reach the console only for failed requests.
    return not _is_access_record(record) or record["level"].no >= 30


def setup_logging(app_settings: Settings) -> None:
    """Configure console logging and the optional rotating access log."""

    logger.remove()
    logger.add(
        sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <7}</level> | <level>{message}</level>"
        ),
        level=app_settings.log_level,
        filter=_stderr_filter,
        colorize=True,
    )

    if not app_settings.log_dir:
        return

    log_dir = Path(app_settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_dir / ACCESS_LOG_FILE,
        format="{time:YYYY-MM-DD HH:mm:ss} | {message}",
        level="INFO",
        filter=_is_access_record,
        rotation=app_settings.log_rotation,
        retention=app_settings.log_retention,
        compression="gz",
    )
    logger.info("Writing access log to {}", log_dir)


def init_sentry(app_settings: Settings) -> None:
    """Initialize Sentry SDK when DSN is configured."""

    if not app_settings.sentry_dsn:
        return

    sentry_sdk.init(
        dsn=app_settings.sentry_dsn,
        environment=app_settings.environment,
        release=app_settings.release,
        traces_sample_rate=app_settings.sentry_traces_sample_rate,
        send_default_pii=False,
    )
