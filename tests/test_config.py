"""Settings defaults and HOSTAWAY_ACCOUNT_{n}_* parsing."""
from cleanops.config import Settings, load_configured_accounts
from cleanops.database import make_engine


def test_default_database_url_uses_declared_driver():
    default_url = Settings.model_fields["database_url"].default
    engine = make_engine(default_url)
    assert engine.dialect.name == "postgresql"
    assert engine.dialect.driver == "psycopg2"
    engine.dispose()


def test_accounts_read_until_first_gap():
    env = {
        "HOSTAWAY_ACCOUNT_1_ID": " 1001 ",
        "HOSTAWAY_ACCOUNT_1_NAME": "Downtown",
        "HOSTAWAY_ACCOUNT_1_API_KEY": "key-1",
        "HOSTAWAY_ACCOUNT_2_ID": "1002",
        "HOSTAWAY_ACCOUNT_2_API_KEY": "key-2",
        "HOSTAWAY_ACCOUNT_4_ID": "1004",
    }
    accounts = load_configured_accounts(env)

    assert [a.account_id for a in accounts] == ["1001", "1002"]
    assert accounts[0].name == "Downtown"
    assert accounts[1].name == "Account 1002"
    assert accounts[1].api_secret == ""


def test_no_accounts_configured():
    assert load_configured_accounts({}) == []
