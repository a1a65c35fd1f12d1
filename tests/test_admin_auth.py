import pytest
import pytest_asyncio

from settlement_sam.core.exceptions import InvalidCredentialsError, LockedError
from settlement_sam.core.security import get_password_hash, verify_token
from settlement_sam.services.admin_auth_service import AdminAuthService

PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def admin(repos):
    return await repos.admins.upsert("admin", get_password_hash(PASSWORD))


@pytest.fixture
def auth(repos, test_settings, clock):
    return AdminAuthService(repos, test_settings, clock)


async def test_login_returns_admin_token(auth, admin, test_settings):
    token = await auth.login("Admin", PASSWORD, "10.0.0.1")
    payload = verify_token(token, "admin", test_settings)
    assert payload["sub"] == "admin"
    assert payload["role"] == "admin"


async def test_wrong_password_counts_down(auth, admin):
    with pytest.raises(InvalidCredentialsError) as exc:
        await auth.login("admin", "nope", "10.0.0.1")
    assert "4 attempts remaining" in exc.value.message


async def test_unknown_user_is_rejected(auth, admin):
    with pytest.raises(InvalidCredentialsError):
        await auth.login("ghost", PASSWORD, "10.0.0.1")


async def test_lockout_after_five_failures(auth, admin, clock):
    for _ in range(4):
        with pytest.raises(InvalidCredentialsError):
            await auth.login("admin", "nope", "10.0.0.1")
    with pytest.raises(InvalidCredentialsError) as exc:
        await auth.login("admin", "nope", "10.0.0.1")
    assert "locked" in exc.value.message

    clock.advance(minutes=1)
    with pytest.raises(LockedError) as locked:
        await auth.login("admin", PASSWORD, "10.0.0.1")
    assert locked.value.retry_after == 14 * 60

    # Lockout is per username and IP
    assert await auth.login("admin", PASSWORD, "10.0.0.2")

    clock.advance(minutes=15)
    assert await auth.login("admin", PASSWORD, "10.0.0.1")


async def test_environment_fallback(repos, test_settings, clock):
    settings = test_settings.model_copy(update={
        "ADMIN_USERNAME": "Owner",
        "ADMIN_PASSWORD_HASH": get_password_hash(PASSWORD),
    })
    auth = AdminAuthService(repos, settings, clock)

    assert await auth.login("owner", PASSWORD, None)
    status = await auth.check_setup()
    assert status.configured
    assert status.source == "environment"


async def test_check_setup(auth, repos):
    assert not (await auth.check_setup()).configured
    await repos.admins.upsert("admin", get_password_hash(PASSWORD))
    status = await auth.check_setup()
    assert status.configured
    assert status.source == "database"
