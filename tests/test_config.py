import pytest
from storefront import create_app
from storefront.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    _database_url,
    get_config,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("STOREFRONT_ENV", "FLASK_ENV", "PORT", "DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_config_from_environment(clean_env):
    assert get_config() is DevelopmentConfig
    clean_env.setenv("PORT", "8080")
    assert get_config() is ProductionConfig
    clean_env.setenv("FLASK_ENV", "testing")
    assert get_config() is TestingConfig
    clean_env.setenv("STOREFRONT_ENV", "development")
    assert get_config() is DevelopmentConfig


def test_unknown_config_name_is_rejected(clean_env):
    with pytest.raises(ValueError, match="Unknown config 'staging'"):
        get_config("staging")


def test_database_url_scheme_is_normalized(clean_env):
    clean_env.setenv("DATABASE_URL", "postgres://shop:pw@db:5432/shop")
    assert _database_url("sqlite://") == "postgresql://shop:pw@db:5432/shop"
    clean_env.delenv("DATABASE_URL")
    assert _database_url("sqlite:///local.db") == "sqlite:///local.db"


def test_production_requires_admin_token(clean_env, monkeypatch):
    monkeypatch.setattr(ProductionConfig, "SECRET_KEY", "real-secret")
    monkeypatch.setattr(ProductionConfig, "ADMIN_API_TOKEN", "")
    monkeypatch.setattr(ProductionConfig, "SQLALCHEMY_DATABASE_URI", "sqlite:///:memory:")
    monkeypatch.setattr(ProductionConfig, "SQLALCHEMY_ENGINE_OPTIONS", {})
    monkeypatch.setattr(ProductionConfig, "REDIS_URL", "")

    with pytest.raises(AssertionError, match="ADMIN_API_TOKEN"):
        create_app("production")
