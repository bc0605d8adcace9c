import pytest

from src.api.auth_service import AuthService
from src.api.errors import InvalidCredentialsError, InvalidTokenError, UserAlreadyExistsError
from src.api.models import AuthenticatedUser
from src.api.passwords import PasswordHasher
from src.api.repositories import InMemoryTaskRepository, InMemoryUserRepository
from src.api.tokens import TokenService

PASSWORD = "Passw0rd!"


class CountingHasher(PasswordHasher):
    def __init__(self) -> None:
        super().__init__(rounds=4)
        self.hash_calls = 0

    def hash(self, plaintext: str) -> str:
        self.hash_calls += 1
        return super().hash(plaintext)


@pytest.fixture()
def users():
    return InMemoryUserRepository(InMemoryTaskRepository())


@pytest.fixture()
def hasher():
    return CountingHasher()


@pytest.fixture()
def tokens(key_pair):
    return TokenService(key_pair)


@pytest.fixture()
def service(users, hasher, tokens):
    return AuthService(users, hasher, tokens)


class TestRegister:
    def test_register_returns_signed_projection(self, service, users, tokens):
        signed = service.register("alice", PASSWORD)
        assert signed.username == "alice"
        assert tokens.verify(signed.token) == signed.id
        assert not hasattr(signed, "password_hash")

        stored = users.get(signed.id)
        assert stored["password_hash"] != PASSWORD
        assert stored["password_hash"].startswith("$2b$")

    def test_duplicate_username_neither_hashes_nor_writes(self, service, users, hasher):
        first = service.register("alice", PASSWORD)
        assert hasher.hash_calls == 1

        with pytest.raises(UserAlreadyExistsError):
            service.register("alice", "Different1!")
        assert hasher.hash_calls == 1
        assert users.get_by_username("alice")["id"] == first.id

    def test_usernames_are_case_sensitive(self, service):
        a = service.register("alice", PASSWORD)
        b = service.register("Alice", PASSWORD)
        assert a.id != b.id


class TestAuthenticate:
    def test_correct_password_returns_verifiable_token(self, service, tokens):
        registered = service.register("alice", PASSWORD)
        signed = service.authenticate("alice", PASSWORD)
        assert signed.id == registered.id
        assert signed.username == "alice"
        assert tokens.verify(signed.token) == registered.id

    def test_wrong_password_and_unknown_user_fail_identically(self, service):
        service.register("alice", PASSWORD)
        with pytest.raises(InvalidCredentialsError) as wrong_password:
            service.authenticate("alice", "Wrong0ne!")
        with pytest.raises(InvalidCredentialsError) as unknown_user:
            service.authenticate("nobody", PASSWORD)
        assert wrong_password.value.message == unknown_user.value.message
        assert wrong_password.value.status_code == unknown_user.value.status_code == 400

    def test_username_match_is_exact(self, service):
        service.register("alice", PASSWORD)
        with pytest.raises(InvalidCredentialsError):
            service.authenticate("ALICE", PASSWORD)


class TestResolveIdentity:
    def test_valid_token_resolves_to_user(self, service):
        registered = service.register("alice", PASSWORD)
        identity = service.resolve_identity(registered.token)
        assert identity == AuthenticatedUser(id=registered.id, username="alice")

    def test_deleted_user_is_rejected(self, service, users):
        registered = service.register("alice", PASSWORD)
        users.delete(registered.id)
        with pytest.raises(InvalidTokenError):
            service.resolve_identity(registered.token)

    def test_token_for_unknown_subject_is_rejected(self, service, tokens):
        with pytest.raises(InvalidTokenError):
            service.resolve_identity(tokens.sign("00000000-0000-4000-8000-000000000000"))

    def test_garbage_token_is_rejected(self, service):
        with pytest.raises(InvalidTokenError):
            service.resolve_identity("garbage")
