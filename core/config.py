"""Settings loaded from the environment (and an optional ``.env`` file)."""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml
from dotenv import load_dotenv

from core.errors import ConfigurationError
from models.scoring import ScoringConfig

DEFAULT_TECH_STACK_TIMEOUT_MS = 10_000
DEFAULT_MAX_EMAILS = 5

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Credentials and tunables. Missing credentials leave a provider unconfigured."""
    whoxy_api_key: str = ""
    hunter_api_key: str = ""
    snov_client_id: str = ""
    snov_client_secret: str = ""
    snov_api_key: str = ""  # Used for both OAuth halves when the pair is unset
    tech_stack_timeout_ms: int = DEFAULT_TECH_STACK_TIMEOUT_MS
    default_max_emails: int = DEFAULT_MAX_EMAILS
    scoring: ScoringConfig = field(default_factory=ScoringConfig)


def load_settings(scoring_config_file: Optional[Union[str, Path]] = None, use_dotenv: bool = True) -> Settings:
    """Read settings from the environment.

    ``scoring_config_file`` takes precedence over ``SCORING_CONFIG_FILE``.
    Comma-separated ``TARGET_COUNTRIES``, ``VALUABLE_PLATFORMS`` and
    ``SPAM_KEYWORDS`` are applied on top of the file overrides.
    """
    if use_dotenv:
        load_dotenv()

    scoring = ScoringConfig()
    path = scoring_config_file or os.getenv("SCORING_CONFIG_FILE", "").strip()
    if path:
        scoring = load_scoring_config(path, base=scoring)
    scoring = scoring.merged(_list_overrides())

    return Settings(
        whoxy_api_key=os.getenv("WHOXY_API_KEY", "").strip(),
        hunter_api_key=os.getenv("HUNTER_API_KEY", "").strip(),
        snov_client_id=os.getenv("SNOV_CLIENT_ID", "").strip(),
        snov_client_secret=os.getenv("SNOV_CLIENT_SECRET", "").strip(),
        snov_api_key=os.getenv("SNOV_API_KEY", "").strip(),
        tech_stack_timeout_ms=_env_int("TECH_STACK_TIMEOUT_MS", DEFAULT_TECH_STACK_TIMEOUT_MS),
        default_max_emails=_env_int("DEFAULT_MAX_EMAILS", DEFAULT_MAX_EMAILS),
        scoring=scoring,
    )


def load_scoring_config(path: Union[str, Path], base: Optional[ScoringConfig] = None) -> ScoringConfig:
    """Merge a YAML file of partial scoring overrides onto ``base``.

    Example file:
        registration:
          target_countries: [US, GB]
        penalties:
          spam_vetoes_total: false
    """
    base = base or ScoringConfig()
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read scoring config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Malformed scoring config {path}: {e}") from e

    if data is None:
        return base
    if not isinstance(data, dict):
        raise ConfigurationError(f"Scoring config {path} must contain a mapping")
    logger.debug(f"Loaded scoring overrides from {path}: {sorted(data)}")
    return base.merged(data)


def _list_overrides() -> Dict[str, Dict[str, Any]]:
    overrides: Dict[str, Dict[str, Any]] = {}
    env_lists = (
        ("TARGET_COUNTRIES", "registration", "target_countries", str.upper),
        ("VALUABLE_PLATFORMS", "tech_stack", "valuable_platforms", None),
        ("SPAM_KEYWORDS", "penalties", "spam_indicators", str.lower),
    )
    for variable, section, key, transform in env_lists:
        values = _env_list(variable)
        if values is None:
            continue
        if transform:
            values = tuple(transform(v) for v in values)
        overrides.setdefault(section, {})[key] = values
    return overrides


def _env_list(name: str) -> Optional[Tuple[str, ...]]:
    raw = os.getenv(name, "")
    values = tuple(v.strip() for v in raw.split(",") if v.strip())
    return values or None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default
    if value <= 0:
        logger.warning(f"Ignoring non-positive {name}={value}, using {default}")
        return default
    return value
