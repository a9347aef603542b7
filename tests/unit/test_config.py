from chainrelay.configuration.config import Settings


def test_load_reads_credentials_and_tracker_url():
    settings = Settings.load({
        "NEXT_PUBLIC_TRACKER_API_URL": "https://tracker.example/api/",
        "ALCHEMY_API_KEY": " key-1 ",
        "PIMLICO_API_KEY": "",
        "UPSTREAM_TIMEOUT_SECONDS": "12.5",
        "CORS_ORIGINS": "https://app.example, ,https://admin.example",
    })
    assert settings.TRACKER_API_URL == "https://tracker.example/api"
    assert settings.credential("ALCHEMY_API_KEY") == "key-1"
    assert settings.credential("PIMLICO_API_KEY") is None
    assert settings.credential(None) is None
    assert settings.UPSTREAM_TIMEOUT_SECONDS == 12.5
    assert settings.CORS_ORIGINS == ["https://app.example", "https://admin.example"]


def test_explicit_tracker_url_wins_over_public_one():
    settings = Settings.load({
        "TRACKER_API_URL": "https://internal.tracker",
        "NEXT_PUBLIC_TRACKER_API_URL": "https://public.tracker",
    })
    assert settings.TRACKER_API_URL == "https://internal.tracker"


def test_defaults_without_environment():
    settings = Settings.load({})
    assert settings.TRACKER_API_URL == ""
    assert settings.provider_credentials == {}
    assert settings.API_PORT == 8000
    assert settings.NO_COLOR is False
