from saleor_checkout_app.apl import InMemoryAPL, SQLiteAPL, create_apl
from saleor_checkout_app.config import APLConfig


def test_in_memory_apl_replaces_and_deletes(auth_data):
    apl = InMemoryAPL()
    apl.set(auth_data)
    apl.set(auth_data.model_copy(update={"token": "rotated"}))

    assert apl.get(auth_data.saleor_api_url).token == "rotated"
    assert len(apl.get_all()) == 1

    apl.delete(auth_data.saleor_api_url)
    assert apl.get(auth_data.saleor_api_url) is None


def test_sqlite_apl_survives_reopen(tmp_path, auth_data):
    db_path = str(tmp_path / "apl.db")
    apl = SQLiteAPL(db_path)
    apl.set(auth_data)
    apl.close()

    reopened = SQLiteAPL(db_path)
    stored = reopened.get(auth_data.saleor_api_url)
    assert stored == auth_data
    assert reopened.get("https://unknown.test/graphql/") is None

    reopened.delete(auth_data.saleor_api_url)
    assert reopened.get_all() == []
    reopened.close()


def test_create_apl_selects_backend(tmp_path):
    assert isinstance(create_apl(APLConfig()), InMemoryAPL)
    sqlite_apl = create_apl(APLConfig(backend="sqlite", db_path=str(tmp_path / "apl.db")))
    assert isinstance(sqlite_apl, SQLiteAPL)
    sqlite_apl.close()
