from staffpanel.db.session import _engine_options


def test_sqlite_skips_pool_tuning() -> None:
    options = _engine_options("sqlite+aiosqlite:///./staffpanel.db")
    assert options == {"connect_args": {"check_same_thread": False}}


def test_networked_database_checks_pooled_connections() -> None:
    options = _engine_options("postgresql+asyncpg://user:pw@db:5432/staffpanel")
    assert options["pool_pre_ping"] is True
    assert options["pool_recycle"] == 300
    assert "connect_args" not in options
