"""Runtime settings for blog-sync.

Reads settings from CLI args, environment variables, .env files, and YAML
config files.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    WRITEAS_ALIAS: Collection alias (required)
    WRITEAS_LOGIN: Account name (required)
    WRITEAS_PASS: Account password (required)
    WRITEAS_ROOT: Directory holding the posts (default: current directory)
    WRITEAS_ENDPOINT: Blog API endpoint (default: https://write.as/api)
    WRITEAS_IMAGE_HOSTING: "snapas" (default) or "webdav"
    WRITEAS_IMAGE_LOGIN: Image store login (default: WRITEAS_LOGIN)
    WRITEAS_IMAGE_PASS: Image store password (default: WRITEAS_PASS)
    WRITEAS_SNAPAS_ENDPOINT: Snap.as API endpoint (default: https://snap.as/api)
    WRITEAS_WEBDAV_URL: WebDAV endpoint (required for webdav)
    WRITEAS_WEBDAV_PUBLISHED_URL: Public URL of the WebDAV images (required
        for webdav)
    WRITEAS_INSECURE: Skip SSL verification (optional, default: false)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from .config_schema import HttpConfig, RetryConfig, UnifiedConfig
from .core.retry import RetryPolicy
from .core.snapas import DEFAULT_SNAPAS_ENDPOINT
from .core.writeas import DEFAULT_WRITEAS_ENDPOINT
from .errors import ConfigError

logger = logging.getLogger(__name__)

IMAGE_BACKENDS = ("snapas", "webdav")


@dataclass
class Settings:
    alias: str
    login: str
    password: str
    root_dir: Path = field(default_factory=Path.cwd)
    writeas_endpoint: str = DEFAULT_WRITEAS_ENDPOINT
    image_hosting: str = "snapas"
    image_login: str = ""
    image_password: str = ""
    snapas_endpoint: str = DEFAULT_SNAPAS_ENDPOINT
    webdav_endpoint: str = ""
    webdav_published_url: str = ""
    insecure: bool = False
    debug: bool = False
    timeout: tuple[float, float] = (10.0, 60.0)
    retry: RetryConfig = field(default_factory=RetryConfig)

    def retry_policy(self) -> RetryPolicy:
        """Build the retry policy described by the ``retry`` section."""
        return RetryPolicy(
            attempts=self.retry.attempts,
            backoff=self.retry.backoff,
            delay=self.retry.delay,
            initial_delay=self.retry.initial_delay,
            max_delay=self.retry.max_delay,
        )


def _check_url(name: str, url: str) -> str:
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        raise ConfigError(
            f"Invalid {name} '{url}': must start with http:// or https://"
        )
    if not urlparse(url).hostname:
        raise ConfigError(f"Invalid {name} '{url}': URL must include a hostname")
    return url.removesuffix("/")


def validate_settings(settings: Settings) -> None:
    """Validate settings and normalize URLs in place.

    Raises:
        ConfigError: If a required value is missing or a value is invalid.
    """
    if not settings.alias.strip():
        raise ConfigError(
            "Collection alias cannot be empty. Set WRITEAS_ALIAS or pass --alias."
        )
    if not settings.login.strip():
        raise ConfigError(
            "Login cannot be empty. Set WRITEAS_LOGIN or pass --login."
        )
    if not settings.password:
        raise ConfigError(
            "Password cannot be empty. Set WRITEAS_PASS or pass --password."
        )

    if not settings.root_dir.is_dir():
        raise ConfigError(f"Root directory '{settings.root_dir}' does not exist")

    settings.writeas_endpoint = _check_url(
        "Write.as endpoint", settings.writeas_endpoint
    )

    if settings.image_hosting not in IMAGE_BACKENDS:
        raise ConfigError(
            f"Invalid image hosting type '{settings.image_hosting}': "
            f"must be one of {', '.join(IMAGE_BACKENDS)}"
        )

    if settings.image_hosting == "snapas":
        settings.snapas_endpoint = _check_url(
            "Snap.as endpoint", settings.snapas_endpoint
        )
    else:
        if not settings.webdav_endpoint or not settings.webdav_published_url:
            raise ConfigError(
                "WebDAV image hosting needs both an endpoint and a published "
                "URL. Set WRITEAS_WEBDAV_URL and WRITEAS_WEBDAV_PUBLISHED_URL."
            )
        settings.webdav_endpoint = _check_url(
            "WebDAV endpoint", settings.webdav_endpoint
        )
        settings.webdav_published_url = _check_url(
            "WebDAV published URL", settings.webdav_published_url
        )

    if settings.insecure:
        logger.warning(
            "WARNING: SSL verification disabled (insecure=True). Use only for development."
        )


def _get_bool_env(key: str) -> bool | None:
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def load_settings(
    alias: str | None = None,
    root: str | None = None,
    login: str | None = None,
    password: str | None = None,
    image_hosting: str | None = None,
    image_login: str | None = None,
    image_password: str | None = None,
    webdav_endpoint: str | None = None,
    webdav_published_url: str | None = None,
    snapas_endpoint: str | None = None,
    writeas_endpoint: str | None = None,
    debug: bool = False,
    config: UnifiedConfig | None = None,
) -> Settings:
    """Load settings with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > YAML config > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        alias ... writeas_endpoint: CLI overrides, None when not given.
        debug: Enable debug logging (CLI flag).
        config: Parsed YAML configuration, used as fallback.

    Returns:
        Validated Settings instance.

    Raises:
        ConfigError: If required settings are missing after checking all
            sources, or a value is invalid.
    """
    cfg = config or UnifiedConfig()
    blog = cfg.blog
    images = cfg.images
    http: HttpConfig = cfg.http

    final_login = login or os.getenv("WRITEAS_LOGIN") or blog.login or ""
    final_password = password or os.getenv("WRITEAS_PASS") or blog.password or ""

    # Image credentials fall back to the blog ones
    final_image_login = (
        image_login
        or os.getenv("WRITEAS_IMAGE_LOGIN")
        or images.login
        or final_login
    )
    final_image_password = (
        image_password
        or os.getenv("WRITEAS_IMAGE_PASS")
        or images.password
        or final_password
    )

    final_root = root or os.getenv("WRITEAS_ROOT") or blog.root
    root_dir = Path(final_root).expanduser() if final_root else Path.cwd()

    env_insecure = _get_bool_env("WRITEAS_INSECURE")
    insecure = env_insecure if env_insecure is not None else http.insecure

    settings = Settings(
        alias=(alias or os.getenv("WRITEAS_ALIAS") or blog.alias or "").strip(),
        login=final_login.strip(),
        password=final_password,
        root_dir=root_dir,
        writeas_endpoint=writeas_endpoint
        or os.getenv("WRITEAS_ENDPOINT")
        or blog.endpoint
        or DEFAULT_WRITEAS_ENDPOINT,
        image_hosting=(
            image_hosting
            or os.getenv("WRITEAS_IMAGE_HOSTING")
            or images.backend
            or "snapas"
        ).strip().lower(),
        image_login=final_image_login,
        image_password=final_image_password,
        snapas_endpoint=snapas_endpoint
        or os.getenv("WRITEAS_SNAPAS_ENDPOINT")
        or images.snapas_endpoint
        or DEFAULT_SNAPAS_ENDPOINT,
        webdav_endpoint=webdav_endpoint
        or os.getenv("WRITEAS_WEBDAV_URL")
        or images.webdav_endpoint
        or "",
        webdav_published_url=webdav_published_url
        or os.getenv("WRITEAS_WEBDAV_PUBLISHED_URL")
        or images.webdav_published_url
        or "",
        insecure=insecure,
        debug=debug,
        timeout=(http.connect_timeout, http.read_timeout),
        retry=cfg.retry,
    )

    validate_settings(settings)

    return settings
