from datetime import timedelta

import pytest

from busroster.models import User
from busroster.service.access.users import create_user, create_default_admin, set_password, UserExistsError, \
    get_user
from busroster.service.credentials import CredentialChecker, SessionTokenVerifier, AuthenticationError, \
    TokenVerificationError, hash_password, check_password


def test_hash_password():
    password_hash = hash_password("hunter22")
    assert password_hash != "hunter22"
    assert check_password(password_hash, "hunter22")
    assert not check_password(password_hash, "hunter23")


async def test_verify(random_admin):
    user = await CredentialChecker().verify(random_admin.username, "correct horse battery")
    assert user.id == random_admin.id


@pytest.mark.parametrize("username, password", [
    ("nobody", "correct horse battery"),
    (None, "wrong"),
])
async def test_verify_bad_credentials(random_admin, username, password):
    with pytest.raises(AuthenticationError):
        await CredentialChecker().verify(username or random_admin.username, password)


async def test_create_user_twice(database):
    await create_user("alex", "password123")
    with pytest.raises(UserExistsError):
        await create_user("alex", "password456")


async def test_set_password(random_admin):
    await set_password(random_admin, "a new password")
    user = await CredentialChecker().verify(random_admin.username, "a new password")
    assert user.id == random_admin.id


async def test_default_admin(database):
    """Assert that the admin account is only created when there are no users."""
    admin = await create_default_admin("password123")
    assert admin.username == "admin"
    assert await create_default_admin("password123") is None
    assert await User.all().count() == 1


async def test_get_user(random_admin):
    assert (await get_user(user_id=random_admin.id)).username == random_admin.username
    assert await get_user(username="nobody") is None


async def test_token_round_trip(random_admin):
    verifier = SessionTokenVerifier("secret", timedelta(hours=1))
    assert verifier.verify_token(verifier.issue_token(random_admin)) == random_admin.id


async def test_expired_token(random_admin):
    verifier = SessionTokenVerifier("secret", timedelta(hours=-1))
    with pytest.raises(TokenVerificationError):
        verifier.verify_token(verifier.issue_token(random_admin))


async def test_token_wrong_secret(random_admin):
    token = SessionTokenVerifier("secret", timedelta(hours=1)).issue_token(random_admin)
    with pytest.raises(TokenVerificationError):
        SessionTokenVerifier("another secret", timedelta(hours=1)).verify_token(token)


def test_garbage_token():
    with pytest.raises(TokenVerificationError):
        SessionTokenVerifier("secret", timedelta(hours=1)).verify_token("deadbeef")
