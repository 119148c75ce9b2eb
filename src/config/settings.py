import logging
import os
from dataclasses import dataclass
from enum import Enum

from dotenv import load_dotenv

from src.utils.error_handlers import MISSING_CONFIG_MESSAGE, ConfigurationError

logger = logging.getLogger(__name__)


class ContainerMode(str, Enum):
    """Which portfolio hierarchy holds the client tasks."""

    MEMBERS = "members"
    PROJECTS = "projects"


class DataSourceMode(str, Enum):
    ASANA = "asana"
    LOCAL = "local"


DEFAULT_ASANA_BASE_URL = "https://app.asana.com/api/1.0"
MAX_AGGREGATION_TIMEOUT_SECONDS = 300.0


def _env_str(key: str, default: str) -> str:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_float(key: str, default: float, minimum: float = 0.0, maximum: float | None = None) -> float:
    """Read a positive float from the environment, falling back to the default when invalid."""
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid numeric value for {key}: {raw}, using default: {default}")
        return default
    if value <= minimum or (maximum is not None and value > maximum):
        logger.warning(f"Out of range value for {key}: {raw}, using default: {default}")
        return default
    return value


def _env_int(key: str, default: int, minimum: int, maximum: int) -> int:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid integer value for {key}: {raw}, using default: {default}")
        return default
    return max(minimum, min(maximum, value))


def _env_enum(key: str, enum_type: type[Enum], default: Enum) -> Enum:
    raw = _env_str(key, default.value).lower()
    try:
        return enum_type(raw)
    except ValueError:
        raise ConfigurationError(
            f"Invalid value for {key}: {raw!r} (expected one of: {', '.join(m.value for m in enum_type)})"
        ) from None


def cors_origins_from_env() -> tuple[str, ...]:
    """Allowed CORS origins from CORS_ORIGINS, or every origin in local/dev.

    Needs no credentials, so the app can install its middleware before the
    rest of the settings are validated at startup.
    """
    load_dotenv()

    # Development: allow all origins for easier testing
    default_origins = "*" if _env_str("ENV", "local") in ("local", "dev") else ""
    return tuple(o.strip() for o in _env_str("CORS_ORIGINS", default_origins).split(",") if o.strip())


@dataclass(frozen=True)
class Settings:
    """Service configuration, built once at startup and passed explicitly."""

    asana_pat: str
    portfolio_id: str

    env: str = "local"
    data_source: DataSourceMode = DataSourceMode.ASANA
    local_data_file: str | None = None
    asana_base_url: str = DEFAULT_ASANA_BASE_URL
    asana_page_size: int = 100
    asana_request_timeout_seconds: float = 30.0
    container_mode: ContainerMode = ContainerMode.MEMBERS

    # Report layout, in PDF points
    report_margin: float = 30.0
    report_row_height: float = 25.0
    report_title: str = "Clients Missing Contact Info"
    report_filename: str = "missing_clients"

    aggregation_timeout_seconds: float = 20.0
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = ()

    # TrueType font for non-Latin client names; built-in Helvetica otherwise
    report_font_path: str | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Load and validate settings from the process environment (and a .env file).

        Raises:
            ConfigurationError: If ASANA_PAT or PORTFOLIO_ID is missing
        """
        load_dotenv()

        asana_pat = os.getenv("ASANA_PAT", "").strip()
        portfolio_id = os.getenv("PORTFOLIO_ID", "").strip()
        missing = [name for name, value in (("ASANA_PAT", asana_pat), ("PORTFOLIO_ID", portfolio_id)) if not value]
        if missing:
            raise ConfigurationError(MISSING_CONFIG_MESSAGE, missing=missing)

        env = _env_str("ENV", "local")

        return cls(
            asana_pat=asana_pat,
            portfolio_id=portfolio_id,
            env=env,
            data_source=_env_enum("DATA_SOURCE", DataSourceMode, DataSourceMode.ASANA),
            local_data_file=os.getenv("LOCAL_DATA_FILE") or None,
            asana_base_url=_env_str("ASANA_BASE_URL", DEFAULT_ASANA_BASE_URL).rstrip("/"),
            asana_page_size=_env_int("ASANA_PAGE_SIZE", 100, 1, 100),
            asana_request_timeout_seconds=_env_float("ASANA_REQUEST_TIMEOUT_SECONDS", 30.0),
            container_mode=_env_enum("CONTAINER_MODE", ContainerMode, ContainerMode.MEMBERS),
            report_margin=_env_float("REPORT_MARGIN", 30.0, maximum=200.0),
            report_row_height=_env_float("REPORT_ROW_HEIGHT", 25.0, maximum=200.0),
            report_title=_env_str("REPORT_TITLE", "Clients Missing Contact Info"),
            report_filename=_env_str("REPORT_FILENAME", "missing_clients"),
            aggregation_timeout_seconds=_env_float(
                "AGGREGATION_TIMEOUT_SECONDS", 20.0, maximum=MAX_AGGREGATION_TIMEOUT_SECONDS
            ),
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
            cors_origins=cors_origins_from_env(),
            report_font_path=_env_str("REPORT_FONT_PATH", "") or None,
        )
