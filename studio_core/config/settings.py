# =============================================================================
# studio_core/config/settings.py
# Connection and storage settings for the data layer
# =============================================================================
"""
StoreSettings - everything the data layer needs, resolved once at startup.

Settings are read from environment variables first and from the
Streamlit secrets file second:

    [supabase]
    url = "https://your-project.supabase.co"
    key = "your-anon-key"

An empty key is valid and means "remote disabled, local only".
"""

from __future__ import annotations
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import toml

from studio_core.errors import ConfigurationError
from studio_core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SECRETS_PATH = Path(".streamlit") / "secrets.toml"


@dataclass(frozen=True)
class StoreSettings:
    """Configuration for the remote endpoint and the local store."""
    base_url: str = "https://myarzcnervxevznfrxhc.supabase.co"
    api_key: str = ""
    app_prefix: str = "richacks"
    schema_version: str = "v3"
    db_path: Path = Path("local_data") / "studio.db"
    timeout: float = 30.0
    legacy_subs_key: str = "richacks_manual_subs"
    default_subs: int = 28

    @property
    def remote_enabled(self) -> bool:
        """True when a credential is configured."""
        return bool(self.api_key)

    def with_overrides(self, **changes: Any) -> StoreSettings:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


def _read_secrets(secrets_path: Path) -> Dict[str, Any]:
    """Load the [supabase] table from a secrets file, or {} if absent."""
    if not secrets_path.exists():
        return {}

    try:
        secrets = toml.load(secrets_path)
    except (toml.TomlDecodeError, OSError) as e:
        raise ConfigurationError(
            f"Could not read secrets file: {e}",
            config_key=str(secrets_path),
        ) from e

    section = secrets.get("supabase", {})
    if not isinstance(section, dict):
        raise ConfigurationError(
            "[supabase] must be a table",
            config_key="supabase",
            expected_type="table",
        )
    return section


def load_settings(
    secrets_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> StoreSettings:
    """
    Resolve StoreSettings from the environment and the secrets file.

    Args:
        secrets_path: Path to secrets.toml (default: .streamlit/secrets.toml)
        environ: Environment mapping (default: os.environ)

    Returns:
        StoreSettings

    Raises:
        ConfigurationError: If the secrets file exists but is malformed
    """
    environ = os.environ if environ is None else environ
    section = _read_secrets(Path(secrets_path) if secrets_path else DEFAULT_SECRETS_PATH)

    settings = StoreSettings()
    overrides: Dict[str, Any] = {}

    url = environ.get("SUPABASE_URL") or section.get("url")
    if url:
        overrides["base_url"] = str(url).rstrip("/")

    key = environ.get("SUPABASE_KEY") or section.get("key")
    if key:
        overrides["api_key"] = str(key)

    db_path = environ.get("STUDIO_DB_PATH")
    if db_path:
        overrides["db_path"] = Path(db_path)

    timeout = environ.get("STUDIO_HTTP_TIMEOUT")
    if timeout:
        try:
            overrides["timeout"] = float(timeout)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid STUDIO_HTTP_TIMEOUT: {timeout!r}",
                config_key="STUDIO_HTTP_TIMEOUT",
                expected_type="float",
            ) from e

    settings = settings.with_overrides(**overrides)
    if not settings.remote_enabled:
        logger.info("No Supabase key configured; data layer runs local-only")
    return settings
