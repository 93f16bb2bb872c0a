from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from review_notifier.models import Platform
from review_notifier.utils.url_utils import (
    DEFAULT_ANDROID_API_BASE_URL,
    DEFAULT_IOS_BASE_URL,
    DEFAULT_PLAY_STORE_BASE_URL,
)


class ConfigError(ValueError):
    """Raised when configuration is invalid."""


@dataclass(slots=True)
class AppIdSettings:
    ios: list[str] = field(default_factory=list)
    android: list[str] = field(default_factory=list)

    def for_platform(self, platform: Platform) -> list[str]:
        if platform is Platform.IOS:
            return list(self.ios)
        return list(self.android)


@dataclass(slots=True)
class ScheduleSettings:
    cron: str = "*/30 * * * *"
    timezone: str = "UTC"


@dataclass(slots=True)
class FetchSettings:
    timeout_seconds: int = 30
    max_workers: int = 8
    review_workers: int = 8
    ios_base_url: str = DEFAULT_IOS_BASE_URL
    play_store_base_url: str = DEFAULT_PLAY_STORE_BASE_URL
    android_api_base_url: str = DEFAULT_ANDROID_API_BASE_URL


@dataclass(slots=True)
class TokenSettings:
    path: str = "api.token"
    refresh_command: str | None = None
    refresh_interval_minutes: int = 30


@dataclass(slots=True)
class SlackSettings:
    use: bool = False
    webhook_env_var: str = "SLACK_WEBHOOK_URL"
    channel: str | None = None
    username: str | None = None
    icon_emoji: str | None = None


@dataclass(slots=True)
class EmailSettings:
    use: bool = False
    smtp_host: str = "localhost"
    smtp_port: int = 587
    use_tls: bool = True
    username: str | None = None
    password_env_var: str = "SMTP_PASSWORD"
    from_address: str = ""
    to_addresses: list[str] = field(default_factory=list)
    subject_prefix: str = "[review-notifier]"


@dataclass(slots=True)
class StorageSettings:
    type: str = "sqlite"
    path: str = "data/reviews.sqlite"


@dataclass(slots=True)
class AppConfig:
    app_ids: AppIdSettings
    accept_language: str = "en"
    outputs: int = -1
    first_time_ignore: bool = False
    schedule: ScheduleSettings = field(default_factory=ScheduleSettings)
    fetch: FetchSettings = field(default_factory=FetchSettings)
    token: TokenSettings = field(default_factory=TokenSettings)
    slack: SlackSettings = field(default_factory=SlackSettings)
    email: EmailSettings = field(default_factory=EmailSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    log_level: str = "INFO"


def as_id_list(value: Any, *, field_name: str) -> list[str]:
    """Normalize an absent value, a single ID or a list of IDs to a list."""
    if value is None:
        return []
    if isinstance(value, bool) or isinstance(value, dict):
        raise ConfigError(f"{field_name} must be an ID or a list of IDs")
    if not isinstance(value, list):
        value = [value]

    ids: list[str] = []
    for item in value:
        if item is None or isinstance(item, (bool, dict, list)):
            raise ConfigError(f"{field_name} contains an invalid ID: {item!r}")
        normalized = str(item).strip()
        if normalized:
            ids.append(normalized)
    return ids


def _as_string_list(value: Any, *, field_name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ConfigError(f"{field_name} must be a list of strings, got: {type(value)!r}")
    return [str(item).strip() for item in value if str(item).strip()]


def _as_bool(value: Any, *, field_name: str) -> bool:
    if isinstance(value, bool):
        return value

    if isinstance(value, int) and value in {0, 1}:
        return bool(value)

    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes", "on"}:
            return True
        if normalized in {"false", "0", "no", "off"}:
            return False

    raise ConfigError(f"{field_name} must be a boolean")


def _as_int(value: Any, *, field_name: str, minimum: int | None = None) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be an integer")

    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be an integer") from exc

    if minimum is not None and parsed < minimum:
        raise ConfigError(f"{field_name} must be >= {minimum}")
    return parsed


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    normalized = str(value).strip()
    return normalized or None


def _section(parsed: dict[str, Any], name: str) -> dict[str, Any]:
    raw = parsed.get(name, {}) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{name} must be a mapping")
    return raw


def _resolve_relative_path(config_path: Path, raw_path: str) -> str:
    candidate = Path(raw_path).expanduser()
    if candidate.is_absolute():
        return str(candidate)
    return str((config_path.parent / candidate).resolve())


def load_config(path: str | Path) -> AppConfig:
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        try:
            parsed = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Config file is not valid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise ConfigError("Config root must be a mapping")

    return parse_config(parsed, config_path=config_path)


def parse_config(parsed: dict[str, Any], *, config_path: Path | None = None) -> AppConfig:
    base_path = config_path or Path.cwd() / "config.yaml"

    raw_app_ids = _section(parsed, "app_id")
    app_ids = AppIdSettings(
        ios=as_id_list(
            raw_app_ids.get("ios", raw_app_ids.get("iOS")),
            field_name="app_id.ios",
        ),
        android=as_id_list(raw_app_ids.get("android"), field_name="app_id.android"),
    )

    raw_outputs = parsed.get("outputs")
    outputs = -1 if raw_outputs is None else _as_int(raw_outputs, field_name="outputs")

    accept_language = str(parsed.get("accept_language", "en")).strip() or "en"

    raw_schedule = _section(parsed, "schedule")
    schedule = ScheduleSettings(
        cron=str(raw_schedule.get("cron", "*/30 * * * *")).strip(),
        timezone=str(raw_schedule.get("timezone", "UTC")).strip() or "UTC",
    )
    try:
        ZoneInfo(schedule.timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(
            f"schedule.timezone is not a known time zone: {schedule.timezone}"
        ) from exc

    raw_fetch = _section(parsed, "fetch")
    fetch = FetchSettings(
        timeout_seconds=_as_int(
            raw_fetch.get("timeout_seconds", 30),
            field_name="fetch.timeout_seconds",
            minimum=1,
        ),
        max_workers=_as_int(
            raw_fetch.get("max_workers", 8),
            field_name="fetch.max_workers",
            minimum=1,
        ),
        review_workers=_as_int(
            raw_fetch.get("review_workers", 8),
            field_name="fetch.review_workers",
            minimum=1,
        ),
        ios_base_url=_as_optional_str(raw_fetch.get("ios_base_url")) or DEFAULT_IOS_BASE_URL,
        play_store_base_url=_as_optional_str(raw_fetch.get("play_store_base_url"))
        or DEFAULT_PLAY_STORE_BASE_URL,
        android_api_base_url=_as_optional_str(raw_fetch.get("android_api_base_url"))
        or DEFAULT_ANDROID_API_BASE_URL,
    )

    raw_token = _section(parsed, "token")
    token = TokenSettings(
        path=str(raw_token.get("path", "api.token")).strip() or "api.token",
        refresh_command=_as_optional_str(raw_token.get("refresh_command")),
        refresh_interval_minutes=_as_int(
            raw_token.get("refresh_interval_minutes", 30),
            field_name="token.refresh_interval_minutes",
            minimum=1,
        ),
    )

    raw_slack = _section(parsed, "slack")
    slack = SlackSettings(
        use=_as_bool(raw_slack.get("use", False), field_name="slack.use"),
        webhook_env_var=str(raw_slack.get("webhook_env_var", "SLACK_WEBHOOK_URL")).strip()
        or "SLACK_WEBHOOK_URL",
        channel=_as_optional_str(raw_slack.get("channel")),
        username=_as_optional_str(raw_slack.get("username")),
        icon_emoji=_as_optional_str(raw_slack.get("icon_emoji")),
    )

    raw_email = _section(parsed, "email")
    email = EmailSettings(
        use=_as_bool(raw_email.get("use", False), field_name="email.use"),
        smtp_host=str(raw_email.get("smtp_host", "localhost")).strip() or "localhost",
        smtp_port=_as_int(raw_email.get("smtp_port", 587), field_name="email.smtp_port", minimum=1),
        use_tls=_as_bool(raw_email.get("use_tls", True), field_name="email.use_tls"),
        username=_as_optional_str(raw_email.get("username")),
        password_env_var=str(raw_email.get("password_env_var", "SMTP_PASSWORD")).strip()
        or "SMTP_PASSWORD",
        from_address=str(raw_email.get("from_address", "")).strip(),
        to_addresses=_as_string_list(
            raw_email.get("to_addresses"),
            field_name="email.to_addresses",
        ),
        subject_prefix=str(raw_email.get("subject_prefix", "[review-notifier]")).strip(),
    )
    if email.use and (not email.from_address or not email.to_addresses):
        raise ConfigError("email.use requires email.from_address and email.to_addresses")

    raw_storage = _section(parsed, "storage")
    storage_path = (
        str(raw_storage.get("path", "data/reviews.sqlite")).strip() or "data/reviews.sqlite"
    )
    storage = StorageSettings(
        type=str(raw_storage.get("type", "sqlite")).strip() or "sqlite",
        path=_resolve_relative_path(base_path, storage_path),
    )

    return AppConfig(
        app_ids=app_ids,
        accept_language=accept_language,
        outputs=outputs,
        first_time_ignore=_as_bool(
            parsed.get("first_time_ignore", False),
            field_name="first_time_ignore",
        ),
        schedule=schedule,
        fetch=fetch,
        token=token,
        slack=slack,
        email=email,
        storage=storage,
        log_level=str(parsed.get("log_level", "INFO")).upper(),
    )
