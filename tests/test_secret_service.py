"""Tests for SecretService posting, user management and moderation."""

from unittest.mock import Mock, patch

import pytest
from sqlalchemy import event

from truthmeter.core.errors import (
    ConflictAppError,
    NotFoundAppError,
    RateLimitAppError,
    StorageAppError,
    ValidationAppError,
)
from truthmeter.db.session import session_scope
from truthmeter.repositories import SecretRepository, VoteRepository


class TestCreateSecret:
    def test_creates_secret_with_trimmed_content(self, service, alice) -> None:
        secret_id = service.create_secret(alice, "desire", "  I want a boat \n")

        secret = service.get_secret(secret_id)
        assert secret.content == "I want a boat"
        assert secret.category == "desire"

    def test_second_post_inside_window_is_rate_limited(self, service, clock: Mock, alice) -> None:
        service.create_secret(alice, "work", "first secret")

        clock.return_value += 5000
        with pytest.raises(RateLimitAppError) as exc_info:
            service.create_secret(alice, "work", "second secret")

        assert exc_info.value.code == "post_rate_limited"
        assert exc_info.value.details["retry_after"] == 10

        clock.return_value += 10001
        assert service.create_secret(alice, "work", "second secret") > 0

    def test_window_is_per_user(self, service, alice, bob) -> None:
        service.create_secret(alice, "work", "alice secret")
        service.create_secret(bob, "work", "bob secret")

    def test_invalid_input_does_not_consume_window(self, service, alice) -> None:
        with pytest.raises(ValidationAppError):
            service.create_secret(alice, "sports", "some secret")
        with pytest.raises(ValidationAppError):
            service.create_secret(alice, "work", "x")

        assert service.create_secret(alice, "work", "valid secret") > 0

    def test_unknown_author(self, service) -> None:
        with pytest.raises(NotFoundAppError) as exc_info:
            service.create_secret("ghost", "work", "who am I")

        assert exc_info.value.code == "user_not_found"
        assert service.list_secrets() == []

    def test_failed_insert_gives_window_back(self, service, alice) -> None:
        failure = StorageAppError(code="storage_error", message="Try again later.")
        with patch.object(SecretRepository, "insert", side_effect=failure):
            with pytest.raises(StorageAppError):
                service.create_secret(alice, "work", "first try")

        assert service.create_secret(alice, "work", "first try") > 0

        with pytest.raises(RateLimitAppError):
            service.create_secret(alice, "work", "too soon")

    def test_failed_insert_restores_previous_post_time(self, service, clock: Mock, alice) -> None:
        service.create_secret(alice, "work", "posted")
        clock.return_value += 20_000

        with patch.object(SecretRepository, "insert", side_effect=StorageAppError(code="storage_error", message="x")):
            with pytest.raises(StorageAppError):
                service.create_secret(alice, "work", "lost")

        clock.return_value += 1
        assert service.create_secret(alice, "work", "retried") > 0

    def test_unknown_author_does_not_hold_window(self, service) -> None:
        for _ in range(2):
            with pytest.raises(NotFoundAppError) as exc_info:
                service.create_secret("ghost", "work", "who am I")
            assert exc_info.value.code == "user_not_found"


class TestUsers:
    def test_create_and_lookup(self, service) -> None:
        user = service.create_user("  Night_Owl ", "hash", "other")

        assert user.nickname == "night_owl"
        assert user.nickname_raw == "Night_Owl"
        assert user.is_admin is False
        assert service.get_user(user.id).nickname_raw == "Night_Owl"
        assert service.get_user_by_nickname("NIGHT_OWL").id == user.id

    def test_nickname_is_unique_ignoring_case(self, service, alice) -> None:
        with pytest.raises(ConflictAppError) as exc_info:
            service.create_user("ALICE", "hash", "female")

        assert exc_info.value.code == "nickname_taken"

    def test_invalid_gender(self, service) -> None:
        with pytest.raises(ValidationAppError):
            service.create_user("Carol", "hash", "robot")

    def test_set_admin_and_password(self, service, bob) -> None:
        assert service.set_user_admin(bob, True) is True
        assert service.get_user(bob).is_admin is True

        assert service.update_user_password(bob, "new-hash") is True
        assert service.get_user(bob).password_hash == "new-hash"

        assert service.set_user_admin("ghost", True) is False

    def test_list_users_with_stats(self, service, alice, bob, admin, post_secret) -> None:
        post_secret(alice)
        post_secret(alice)
        post_secret(bob)

        users = service.list_users_with_stats()

        assert [u.nickname for u in users] == ["Alice", "Bob", "Root"]
        counts = {u.id: u.secret_count for u in users}
        assert counts == {alice: 2, bob: 1, admin: 0}
        assert next(u for u in users if u.id == admin).is_admin is True

    def test_stats_serialize_with_wire_names(self, service, alice) -> None:
        dumped = service.list_users_with_stats()[0].model_dump(by_alias=True)
        assert set(dumped) == {"id", "nickname", "gender", "isAdmin", "secretCount"}


class TestModeration:
    def test_delete_secret_removes_its_votes(self, service, session_factory, alice, bob, post_secret) -> None:
        secret_id = post_secret(alice)
        service.record_vote(secret_id, bob, "truth")

        assert service.delete_secret(secret_id) is True

        with session_scope(session_factory) as db:
            assert VoteRepository(db).count_for_secret(secret_id) == 0
        with pytest.raises(NotFoundAppError):
            service.get_secret(secret_id)

    def test_delete_missing_secret(self, service) -> None:
        assert service.delete_secret(42) is False

    def test_delete_user_removes_their_secrets(self, service, alice, bob, post_secret) -> None:
        post_secret(alice, "work", "alice at work")
        bob_secret = post_secret(bob, "work", "bob at work")

        assert service.delete_user(alice) is True

        assert [s.id for s in service.list_secrets()] == [bob_secret]
        assert service.get_user(alice) is None

    def test_delete_user_retracts_their_votes(self, service, session_factory, alice, bob, admin, post_secret) -> None:
        bob_secret = post_secret(bob)
        service.record_vote(bob_secret, alice, "truth")
        service.record_vote(bob_secret, admin, "lie")

        service.delete_user(alice)

        secret = service.get_secret(bob_secret)
        assert (secret.truth_votes, secret.lie_votes) == (0, 1)
        with session_scope(session_factory) as db:
            assert VoteRepository(db).count_for_secret(bob_secret) == 1

    def test_delete_user_removes_votes_on_their_secrets(self, service, session_factory, alice, bob, post_secret) -> None:
        alice_secret = post_secret(alice)
        service.record_vote(alice_secret, bob, "lie")

        service.delete_user(alice)

        with session_scope(session_factory) as db:
            assert VoteRepository(db).count_for_secret(alice_secret) == 0
        assert service.list_secrets() == []

    def test_delete_missing_user(self, service) -> None:
        assert service.delete_user("ghost") is False

    def test_list_all_secrets_limit(self, service, alice, post_secret) -> None:
        for i in range(4):
            post_secret(alice, "other", f"secret {i}")

        assert len(service.list_all_secrets()) == 4
        assert len(service.list_all_secrets(2)) == 2

        with pytest.raises(ValidationAppError):
            service.list_all_secrets(0)

    def test_vote_committed_while_user_is_deleted_is_retracted(
        self, service, engine, session_factory, alice, bob, post_secret
    ) -> None:
        secret_id = post_secret(alice)
        injected: list[str] = []

        def vote_before_retraction(conn, cursor, statement, parameters, context, executemany):
            if not injected and statement.startswith("DELETE FROM truth_meter_votes"):
                injected.append(statement)
                service.record_vote(secret_id, bob, "truth")

        event.listen(engine, "before_cursor_execute", vote_before_retraction)
        try:
            assert service.delete_user(bob) is True
        finally:
            event.remove(engine, "before_cursor_execute", vote_before_retraction)

        assert injected
        secret = service.get_secret(secret_id)
        with session_scope(session_factory) as db:
            ledger = VoteRepository(db).count_for_secret(secret_id)
        assert secret.truth_votes + secret.lie_votes == ledger == 0
