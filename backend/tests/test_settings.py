"""Settings parsing tests."""

from __future__ import annotations

from app.config import AppSettings


def test_sources_accept_comma_separated_environment(monkeypatch):
    monkeypatch.setenv("INGEST_SOURCES", "MoneySuperMarket, DirectLenders,")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:4200,https://deals.example.test")

    settings = AppSettings(_env_file=None)

    assert settings.ingest_sources == ["MoneySuperMarket", "DirectLenders"]
    assert settings.cors_origins == ["http://localhost:4200", "https://deals.example.test"]


def test_sources_accept_json_environment(monkeypatch):
    monkeypatch.setenv("INGEST_SOURCES", '["CompareTheMarket", "Sample"]')

    assert AppSettings(_env_file=None).ingest_sources == ["CompareTheMarket", "Sample"]


def test_defaults_and_credential_masking(monkeypatch):
    monkeypatch.delenv("INGEST_SOURCES", raising=False)
    settings = AppSettings(_env_file=None, database_url="postgresql+asyncpg://user:secret@db:5432/deals")

    assert settings.ingest_sources == ["MoneySuperMarket", "CompareTheMarket", "DirectLenders"]
    assert settings.dict_for_logging()["database_url"] == "postgresql+asyncpg://***@db:5432/deals"
    assert AppSettings(_env_file=None, ingest_sources="Sample").ingest_sources == ["Sample"]
