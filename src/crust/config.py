"""Application configuration.

AppConfig is a frozen dataclass. Presets and environment overrides build new
instances with ``dataclasses.replace``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

_PACKAGE_DIR = Path(__file__).parent


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, data_dir="/var/lib/crust")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False
    environment: str = "staging"

    # Storage
    data_dir: str | Path = ".data"

    # Templates
    template_dir: str | Path = _PACKAGE_DIR / "templates"
    autoescape: bool = True

    # Static files (None disables the GET fallback)
    static_dir: str | Path | None = _PACKAGE_DIR / "public"

    # Cookies
    session_cookie: str = "sessionId"
    token_cookie: str = "token"

    # Auth
    token_expiration: int = 60 * 60  # seconds

    # Payments (Stripe)
    stripe_secret: str = ""
    stripe_url: str = "https://api.stripe.com"
    currency: str = "usd"

    # E-mail (Mailgun)
    mailgun_domain: str = ""
    mailgun_api_key: str = ""
    mailgun_from: str = ""
    mailgun_url: str = "https://api.mailgun.net/v3"

    # Logging
    log_level: str = "info"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppConfig:
        """Build a config from the named preset plus environment overrides.

        ``CRUST_ENV`` selects ``staging`` (default) or ``production``.
        Unknown names fall back to staging.
        """
        env = os.environ if environ is None else environ
        name = env.get("CRUST_ENV", "").strip().lower()
        config = _PRESETS.get(name, _PRESETS["staging"])

        overrides: dict[str, object] = {}
        if "CRUST_HOST" in env:
            overrides["host"] = env["CRUST_HOST"]
        if "CRUST_PORT" in env:
            overrides["port"] = int(env["CRUST_PORT"])
        if "CRUST_DEBUG" in env:
            overrides["debug"] = env["CRUST_DEBUG"].lower() in ("1", "true", "yes", "on")
        if "CRUST_DATA_DIR" in env:
            overrides["data_dir"] = env["CRUST_DATA_DIR"]
        if "CRUST_TOKEN_EXPIRATION" in env:
            overrides["token_expiration"] = int(env["CRUST_TOKEN_EXPIRATION"])
        if "CRUST_LOG_LEVEL" in env:
            overrides["log_level"] = env["CRUST_LOG_LEVEL"]
        if "STRIPE_SECRET" in env:
            overrides["stripe_secret"] = env["STRIPE_SECRET"]
        if "MAILGUN_DOMAIN" in env:
            overrides["mailgun_domain"] = env["MAILGUN_DOMAIN"]
        if "MAILGUN_API_KEY" in env:
            overrides["mailgun_api_key"] = env["MAILGUN_API_KEY"]
        if "MAILGUN_FROM" in env:
            overrides["mailgun_from"] = env["MAILGUN_FROM"]

        return replace(config, **overrides) if overrides else config


_PRESETS: dict[str, AppConfig] = {
    "staging": AppConfig(environment="staging", port=3000),
    "production": AppConfig(environment="production", port=5000),
}
