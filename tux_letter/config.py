"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ScrapeConfig: Listing/article fetching settings shared by all scrapers
- CacheConfig: Location of the persisted seen-links file
- ProviderConfig: LLM provider settings
- SummaryConfig: Prompt shaping and completion settings
- MailConfig: SMTP delivery settings
- LoggingConfig: Logging behavior
- ScheduleConfig: Daily trigger settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml


@dataclass
class ScrapeConfig:
    """Configuration for scraping the news sources.

    Attributes:
        timeout_seconds: HTTP request timeout for listing and article pages
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
        max_items: Maximum number of new articles fetched per source and run
        delay_seconds: Courtesy pause before each article fetch on news sites
        lore_delay_seconds: Courtesy pause before each message fetch on lore
        mode: "sequential" or "concurrent" execution across sources
        concurrency: Maximum number of sources discovered at once in concurrent mode
        sources: Registered source names, in execution order
    """

    timeout_seconds: float = 30.0
    trust_env: bool = True
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    max_items: int = 5
    delay_seconds: float = 1.0
    lore_delay_seconds: float = 1.5
    mode: str = "sequential"
    concurrency: int = 2
    sources: list[str] = field(
        default_factory=lambda: ["lore", "phoronix", "linuxcom", "itsfoss"]
    )


@dataclass
class CacheConfig:
    """Configuration for the seen-links cache.

    Attributes:
        path: JSON file holding the seen links
    """

    path: str = "cache/seen_links.json"


@dataclass
class ProviderConfig:
    """Configuration for LLM provider.

    Attributes:
        name: Provider name ("openrouter", "openai" or "openai_compatible")
        model: Model identifier sent with every completion request
        api_key_env: Environment variable name containing the API key
        base_url: Base URL of the chat-completion API
        api_key: Optional inline API key (overrides env var)
        timeout_seconds: Completion request timeout
        trust_env: Whether to respect system proxy settings for API requests
        referer: Value of the HTTP-Referer header OpenRouter uses for attribution
        app_title: Value of the X-Title header OpenRouter uses for attribution
    """

    name: str = "openrouter"
    model: str = "meta-llama/llama-3.1-8b-instruct:free"
    api_key_env: str = "OPENROUTER_API_KEY"
    base_url: str = "https://openrouter.ai/api/v1"
    api_key: str | None = None
    timeout_seconds: float = 30.0
    trust_env: bool = True
    referer: str = "https://localhost:3000"
    app_title: str = "Tux Letter"


@dataclass
class SummaryConfig:
    """Configuration for digest synthesis.

    Attributes:
        body_max_chars: Maximum characters of each item body placed in the prompt
        max_tokens: Max output tokens for the synthesis call
        temperature: Sampling temperature for the synthesis call
    """

    body_max_chars: int = 1500
    max_tokens: int = 2000
    temperature: float = 0.3


@dataclass
class MailConfig:
    """Configuration for digest delivery.

    Attributes:
        smtp_host: SMTP server host
        smtp_port: SMTP server port
        use_ssl: Connect with implicit TLS; otherwise upgrade with STARTTLS
        timeout_seconds: SMTP socket timeout
        user_env: Environment variable holding the SMTP login / sender address
        password_env: Environment variable holding the SMTP password
        default_sender: Sender address used when user_env is unset
        sender_name: Display name of the sender
        recipient: The single recipient of every digest
    """

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    use_ssl: bool = True
    timeout_seconds: float = 30.0
    user_env: str = "GMAIL_USER"
    password_env: str = "GMAIL_APP_PASSWORD"
    default_sender: str = "tuxletter@gmail.com"
    sender_name: str = "Tux Letter"
    recipient: str = "kristyancarvalho@gmail.com"


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        directory: Directory holding the log file
        filename: Name of the main log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = True
    format: str = "jsonl"
    directory: str = "logs"
    filename: str = "tux_letter.jsonl"


@dataclass
class ScheduleConfig:
    """Configuration for the daily trigger.

    Attributes:
        hour: Hour of the daily run
        minute: Minute of the daily run
        timezone: IANA timezone the trigger is evaluated in
    """

    hour: int = 20
    minute: int = 0
    timezone: str = "America/Sao_Paulo"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    scrape: ScrapeConfig = field(default_factory=ScrapeConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    mail: MailConfig = field(default_factory=MailConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        scrape=ScrapeConfig(**data["scrape"]),
        cache=CacheConfig(**data["cache"]),
        provider=ProviderConfig(**data["provider"]),
        summary=SummaryConfig(**data["summary"]),
        mail=MailConfig(**data["mail"]),
        logging=LoggingConfig(**data["logging"]),
        schedule=ScheduleConfig(**data["schedule"]),
    )


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env)


def get_mail_credentials(cfg: MailConfig) -> tuple[str, str | None]:
    """Return the (sender, password) pair for SMTP login."""
    sender = os.getenv(cfg.user_env) or cfg.default_sender
    return sender, os.getenv(cfg.password_env)
