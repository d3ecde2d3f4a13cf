from invite_gate.config import Settings
from invite_gate.database import Database, _quote_search_path, build_database_url


def test_settings_defaults():
    settings = Settings(_env_file=None)

    assert settings.db_pool_size == 5
    assert settings.claim_ttl_minutes == 15
    assert settings.consume_grace_minutes == 15
    assert settings.gated_provider == "email"


def test_database_url_wins_over_discrete_fields():
    settings = Settings(_env_file=None, database_url="postgresql+psycopg://u:p@db.internal/invites", host="ignored")

    url = build_database_url(settings)

    assert url.host == "db.internal"
    assert url.database == "invites"


def test_database_url_from_discrete_fields_escapes_password():
    settings = Settings(
        _env_file=None,
        host="db.internal",
        port=6543,
        database="invites",
        db_username="gate",
        db_password="p@ss/word",
    )

    url = build_database_url(settings)

    assert url.drivername == "postgresql+psycopg"
    assert url.port == 6543
    assert url.password == "p@ss/word"
    assert "p@ss/word" not in url.render_as_string(hide_password=True)


def test_search_path_is_quoted():
    assert _quote_search_path("auth, public") == '"auth", "public"'
    assert _quote_search_path('auth,"we""ird"') == '"auth", "we""ird"'


def test_already_quoted_schema_is_not_escaped_twice():
    assert _quote_search_path('"we""ird"') == '"we""ird"'
    assert _quote_search_path('"Auth", public') == '"Auth", "public"'
    # an unquoted name containing a quote is escaped once
    assert _quote_search_path('we"ird') == '"we""ird"'


async def test_sqlite_database_lifecycle(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'lifecycle.db'}")
    await database.create_all()
    try:
        assert await database.ping() is True
    finally:
        await database.dispose()


class FakeSecretsClient:
    def __init__(self):
        self.calls = []

    def get_secret_value(self, SecretId):
        self.calls.append(SecretId)
        return {"SecretString": '{"username": "gate", "password": "rotated", "host": "rds.internal"}'}


def test_secrets_manager_caches_json_secret():
    from invite_gate.secrets_manager import SecretsManager

    manager = SecretsManager(region_name="eu-west-1")
    manager._client = FakeSecretsClient()

    first = manager.get_json_secret("invite-gate/db")
    second = manager.get_json_secret("invite-gate/db")

    assert first == second == {"username": "gate", "password": "rotated", "host": "rds.internal"}
    assert manager._client.calls == ["invite-gate/db"]

    manager.clear_cache()
    manager.get_secret("invite-gate/db")
    assert len(manager._client.calls) == 2


def test_production_settings_read_secrets_manager(monkeypatch):
    import invite_gate.config as config_module

    class FakeManager:
        def get_db_credentials(self):
            return {"username": "gate", "password": "rotated", "host": "rds.internal"}

        def get_api_key(self, service_name):
            assert service_name == "sign-in-gate"
            return "hook-key"

    monkeypatch.setattr(config_module, "_secrets_manager", lambda region: FakeManager())

    settings = Settings(_env_file=None, environment="production")

    assert settings.db_username == "gate"
    assert settings.db_password.get_secret_value() == "rotated"
    assert settings.host == "rds.internal"
    assert settings.gate_hook_secret.get_secret_value() == "hook-key"


def test_models_map_columns_only():
    from sqlalchemy import inspect

    from invite_gate.models import InviteClaim, InviteCode

    assert list(inspect(InviteCode).relationships) == []
    assert list(inspect(InviteClaim).relationships) == []
