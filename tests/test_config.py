from pathlib import Path

from tux_letter.config import AppConfig, get_api_key, get_mail_credentials, load_config


def test_defaults_without_file() -> None:
    cfg = load_config(None)

    assert cfg == AppConfig()
    assert cfg.scrape.max_items == 5
    assert cfg.scrape.sources == ["lore", "phoronix", "linuxcom", "itsfoss"]
    assert cfg.cache.path == "cache/seen_links.json"
    assert (cfg.summary.max_tokens, cfg.summary.temperature) == (2000, 0.3)
    assert (cfg.schedule.hour, cfg.schedule.minute) == (20, 0)


def test_yaml_overrides_are_merged(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "scrape:\n"
        "  mode: concurrent\n"
        "  sources: [phoronix]\n"
        "mail:\n"
        "  recipient: reader@example.com\n"
        "unknown_section:\n"
        "  ignored: true\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.scrape.mode == "concurrent"
    assert cfg.scrape.sources == ["phoronix"]
    assert cfg.scrape.max_items == 5
    assert cfg.mail.recipient == "reader@example.com"
    assert cfg.mail.smtp_host == "smtp.gmail.com"


def test_empty_yaml_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(str(path)) == AppConfig()


def test_inline_api_key_wins(monkeypatch) -> None:
    monkeypatch.setenv("OPENROUTER_API_KEY", "from-env")
    cfg = AppConfig()

    assert get_api_key(cfg.provider) == "from-env"
    cfg.provider.api_key = "inline"
    assert get_api_key(cfg.provider) == "inline"


def test_mail_credentials(monkeypatch) -> None:
    monkeypatch.setenv("GMAIL_USER", "bot@example.com")
    monkeypatch.delenv("GMAIL_APP_PASSWORD", raising=False)

    assert get_mail_credentials(AppConfig().mail) == ("bot@example.com", None)
