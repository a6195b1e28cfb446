import json
from pathlib import Path

import pytest

from tux_letter.config import AppConfig
from tux_letter.core.cache import CacheStats, LinkCache
from tux_letter.core.types import Item, SynthesizedResult
from tux_letter.runner import EMPTY_DIGEST_TEXT, PreflightError, clean_cache, run_pipeline


class FakeAggregator:
    def __init__(self, items: list[Item], cache: LinkCache):
        self.items = items
        self.cache = cache
        self.scrapers = {"lore": None, "phoronix": None}
        self.last_counts: dict[str, int] = {}
        self.scraped_with = None
        self.persisted = 0

    def get_cache_stats(self) -> CacheStats:
        return self.cache.get_stats()

    async def scrape_all(self) -> list[Item]:
        self.scraped_with = "all"
        self.cache.mark_multiple_as_seen(item.link for item in self.items)
        self.last_counts = {"lore": 0, "phoronix": len(self.items)}
        return self.items

    async def scrape_specific(self, names) -> list[Item]:
        self.scraped_with = list(names)
        return await self.scrape_all()

    def bot_verification_count(self) -> int:
        return 2

    def persist_cache(self) -> bool:
        self.persisted += 1
        return self.cache.persist()


class FakeSynthesizer:
    def __init__(self, ok: bool = True):
        self.ok = ok
        self.batches = []

    def test_connection(self) -> bool:
        return self.ok

    def synthesize(self, items):
        self.batches.append(items)
        return SynthesizedResult(text="digest", references=[item.link for item in items])


class FakeMailer:
    def __init__(self, ok: bool = True, error: Exception | None = None):
        self.ok = ok
        self.error = error
        self.sent = []

    def test_connection(self) -> bool:
        return self.ok

    def send(self, payload) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(payload)


def _item(link: str) -> Item:
    return Item(type="news", title="t", author="a", date="d", body="b", link=link, source="phoronix")


def _cfg(tmp_path: Path) -> AppConfig:
    cfg = AppConfig()
    cfg.cache.path = str(tmp_path / "seen.json")
    return cfg


def test_happy_path_sends_and_persists(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path)
    cache = LinkCache(cfg.cache.path)
    aggregator = FakeAggregator([_item("https://a"), _item("https://b")], cache)
    mailer = FakeMailer()

    payload = run_pipeline(cfg, aggregator=aggregator, synthesizer=FakeSynthesizer(), mailer=mailer)

    assert mailer.sent == [payload]
    assert payload.text == "digest"
    assert payload.references == ["https://a", "https://b"]
    assert payload.total_items == 2
    assert payload.bot_verification_count == 2
    assert payload.source_counts == {"lore": 0, "phoronix": 2}
    saved = json.loads(Path(cfg.cache.path).read_text(encoding="utf-8"))
    assert saved["seenLinks"] == ["https://a", "https://b"]


def test_specific_sources_are_forwarded(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path)
    aggregator = FakeAggregator([_item("https://a")], LinkCache(cfg.cache.path))

    run_pipeline(
        cfg,
        sources=["phoronix"],
        aggregator=aggregator,
        synthesizer=FakeSynthesizer(),
        mailer=FakeMailer(),
    )

    assert aggregator.scraped_with == ["phoronix"]


def test_empty_batch_sends_notice_without_persisting(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path)
    aggregator = FakeAggregator([], LinkCache(cfg.cache.path))
    synthesizer = FakeSynthesizer()
    mailer = FakeMailer()

    payload = run_pipeline(cfg, aggregator=aggregator, synthesizer=synthesizer, mailer=mailer)

    assert payload.text == EMPTY_DIGEST_TEXT
    assert payload.references == []
    assert payload.total_items == 0
    assert mailer.sent == [payload]
    assert synthesizer.batches == []
    assert aggregator.persisted == 0
    assert not Path(cfg.cache.path).exists()


@pytest.mark.parametrize(
    "synthesizer, mailer",
    [(FakeSynthesizer(ok=False), FakeMailer()), (FakeSynthesizer(), FakeMailer(ok=False))],
)
def test_failed_preflight_aborts_before_scraping(tmp_path: Path, synthesizer, mailer) -> None:
    cfg = _cfg(tmp_path)
    aggregator = FakeAggregator([_item("https://a")], LinkCache(cfg.cache.path))

    with pytest.raises(PreflightError):
        run_pipeline(cfg, aggregator=aggregator, synthesizer=synthesizer, mailer=mailer)

    assert aggregator.scraped_with is None
    assert mailer.sent == []


def test_missing_credentials_fail_preflight(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    cfg = _cfg(tmp_path)
    aggregator = FakeAggregator([], LinkCache(cfg.cache.path))

    with pytest.raises(PreflightError, match="LLM provider unavailable"):
        run_pipeline(cfg, aggregator=aggregator, mailer=FakeMailer())


def test_send_failure_leaves_cache_untouched(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path)
    aggregator = FakeAggregator([_item("https://a")], LinkCache(cfg.cache.path))
    mailer = FakeMailer(error=OSError("network down"))

    with pytest.raises(OSError):
        run_pipeline(cfg, aggregator=aggregator, synthesizer=FakeSynthesizer(), mailer=mailer)

    assert aggregator.persisted == 0
    assert not Path(cfg.cache.path).exists()


def test_clean_cache_reports_before_and_after(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path)
    cache = LinkCache(cfg.cache.path)
    cache.mark_multiple_as_seen(["https://a", "https://b"])
    cache.persist()

    before, after = clean_cache(cfg)

    assert before.total_links == 2
    assert before.exists is True
    assert after.total_links == 0
    assert after.exists is False
