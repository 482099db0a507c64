import pytest

from dreamcatcher.errors import InvalidCredentials
from dreamcatcher.models import Booking
from dreamcatcher.security.passwords import PasswordHasher
from dreamcatcher.services.auth_service import AuthService

from conftest import ADMIN_EMAIL


class CountingHasher(PasswordHasher):
    def __init__(self, rounds: int) -> None:
        super().__init__(rounds=rounds)
        self.checked = 0

    def verify(self, plaintext, digest):
        self.checked += 1
        return super().verify(plaintext, digest)


@pytest.fixture
def counting_hasher(settings):
    return CountingHasher(rounds=settings.bcrypt_rounds)


@pytest.fixture
def auth_service(counting_hasher, client_tokens, admin_tokens):
    return AuthService(hasher=counting_hasher, client_tokens=client_tokens, admin_tokens=admin_tokens)


@pytest.fixture
async def booking(session_factory, hasher):
    async with session_factory() as session:
        booking = Booking(
            client_code="4321",
            password_hash=hasher.hash("secret1"),
            access_key="1234",
            email="a@b.com",
            phone_number="555",
        )
        session.add(booking)
        await session.commit()
    return booking


async def test_unknown_client_code_still_runs_bcrypt(session_factory, auth_service, counting_hasher, booking):
    async with session_factory() as session:
        with pytest.raises(InvalidCredentials) as unknown:
            await auth_service.login_client(session, "0000", "secret1")
    assert counting_hasher.checked == 1

    async with session_factory() as session:
        with pytest.raises(InvalidCredentials) as wrong:
            await auth_service.login_client(session, "4321", "nope")
    assert counting_hasher.checked == 2
    assert unknown.value.detail == wrong.value.detail


async def test_unknown_admin_email_still_runs_bcrypt(session_factory, auth_service, counting_hasher, admin):
    async with session_factory() as session:
        with pytest.raises(InvalidCredentials):
            await auth_service.login_admin(session, "who@b.com", "whatever")
    assert counting_hasher.checked == 1

    async with session_factory() as session:
        with pytest.raises(InvalidCredentials):
            await auth_service.login_admin(session, ADMIN_EMAIL, "whatever")
    assert counting_hasher.checked == 2


async def test_correct_password_issues_client_token(session_factory, auth_service, client_tokens, booking):
    async with session_factory() as session:
        token = await auth_service.login_client(session, " 4321 ", "secret1")

    assert client_tokens.verify(token)["sub"] == "4321"


def test_verify_missing_never_matches(hasher):
    assert hasher.verify_missing("no-such-account") is False
