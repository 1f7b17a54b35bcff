from storefront import config


def test_load_settings_defaults(monkeypatch):
    for name in ("STRIPE_SECRET_KEY", "PAYMENT_CURRENCY", "SHIPPING_COUNTRIES", "GUEST_EMAIL", "SUPABASE_URL",
                 "NEXT_PUBLIC_SUPABASE_URL", "CHECKOUT_TIMEOUT_SECONDS", "VERIFY_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    s = config.load_settings()
    assert s.currency == "inr"
    assert s.shipping_countries == ["IN"]
    assert s.guest_email == "guest@kbeauty.com"
    assert s.checkout_timeout == 10.0
    assert s.verify_timeout == 5.0
    assert s.payments_configured is False


def test_load_settings_cleans_values(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY", ' "sk_test_abc" ')
    monkeypatch.setenv("SUPABASE_URL", "`kbeauty.supabase.co/`")
    monkeypatch.delenv("SUPABASE_SERVICE_KEY", raising=False)
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "'service'")
    monkeypatch.setenv("SHIPPING_COUNTRIES", "in, kr")
    monkeypatch.setenv("PAYMENT_CURRENCY", "USD")
    monkeypatch.setenv("VERIFY_TIMEOUT_SECONDS", "not-a-number")

    s = config.load_settings()
    assert s.stripe_secret_key == "sk_test_abc"
    assert s.supabase_url == "https://kbeauty.supabase.co"
    assert s.supabase_service_key == "service"
    assert s.supabase_configured is True
    assert s.shipping_countries == ["IN", "KR"]
    assert s.currency == "usd"
    assert s.verify_timeout == 5.0


def test_hsts_flag_accepts_legacy_alias(monkeypatch):
    monkeypatch.delenv("HSTS_ENABLED", raising=False)
    monkeypatch.setenv("COOKIE_SECURE", "true")
    assert config.load_settings().hsts_enabled is True

    monkeypatch.setenv("HSTS_ENABLED", "false")
    assert config.load_settings().hsts_enabled is False
