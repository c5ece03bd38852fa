#!/usr/bin/env python3
"""Tests for the identity provider and auth context."""

import time
from concurrent.futures import ThreadPoolExecutor

import jwt
import pytest
from flask import Flask
from flask_bcrypt import Bcrypt

from autobuddy import AuthContext, AuthError, AuthNotReady, IdentityProvider, StoreError, User

SECRET = "test-secret"


@pytest.fixture
def bcrypt():
    app = Flask(__name__)
    app.config["BCRYPT_LOG_ROUNDS"] = 4
    return Bcrypt(app)


@pytest.fixture
def provider(tmp_path, bcrypt):
    return IdentityProvider(tmp_path / "accounts.yaml", SECRET, bcrypt=bcrypt)


class TestIdentityProvider:
    """Tests for register/sign_in/resolve."""

    def test_register_returns_user_and_credential(self, provider):
        user, credential = provider.register("Driver@Example.com ", "hunter2")
        assert user.email == "driver@example.com"
        assert user.uid
        assert provider.resolve(credential) == user

    def test_register_duplicate_email_rejected(self, provider):
        provider.register("driver@example.com", "hunter2")
        with pytest.raises(AuthError):
            provider.register("DRIVER@example.com", "other")

    def test_register_requires_email_and_password(self, provider):
        with pytest.raises(AuthError):
            provider.register("", "hunter2")
        with pytest.raises(AuthError):
            provider.register("driver@example.com", "")

    def test_password_is_not_stored_in_clear(self, provider, tmp_path):
        provider.register("driver@example.com", "hunter2")
        assert "hunter2" not in (tmp_path / "accounts.yaml").read_text()

    def test_sign_in(self, provider):
        registered, _ = provider.register("driver@example.com", "hunter2")
        user, credential = provider.sign_in("driver@example.com", "hunter2")
        assert user == registered
        assert provider.resolve(credential) == registered

    def test_sign_in_wrong_password(self, provider):
        provider.register("driver@example.com", "hunter2")
        with pytest.raises(AuthError):
            provider.sign_in("driver@example.com", "wrong")

    def test_sign_in_unknown_email(self, provider):
        with pytest.raises(AuthError):
            provider.sign_in("nobody@example.com", "hunter2")

    def test_resolve_rejects_garbage(self, provider):
        assert provider.resolve(None) is None
        assert provider.resolve("") is None
        assert provider.resolve("not-a-token") is None

    def test_resolve_rejects_other_secret(self, provider):
        user, _ = provider.register("driver@example.com", "hunter2")
        forged = jwt.encode({"sub": user.uid, "exp": int(time.time()) + 60}, "other", algorithm="HS256")
        assert provider.resolve(forged) is None

    def test_resolve_rejects_expired(self, provider):
        user, _ = provider.register("driver@example.com", "hunter2")
        expired = jwt.encode({"sub": user.uid, "exp": int(time.time()) - 60}, SECRET, algorithm="HS256")
        assert provider.resolve(expired) is None

    def test_resolve_rejects_unknown_user(self, provider):
        token = provider.issue_credential(User(uid="ghost", email="ghost@example.com"))
        assert provider.resolve(token) is None

    def test_resolve_with_corrupt_accounts_is_no_user(self, provider, tmp_path):
        _, credential = provider.register("driver@example.com", "hunter2")
        (tmp_path / "accounts.yaml").write_text("a: [unclosed\n")
        assert provider.resolve(credential) is None

    def test_undecodable_accounts_raise_store_error(self, provider, tmp_path):
        (tmp_path / "accounts.yaml").write_bytes(b"\xff\xfe")
        with pytest.raises(StoreError):
            provider.sign_in("driver@example.com", "hunter2")

    def test_concurrent_registrations_are_all_kept(self, provider):
        emails = [f"driver{i}@example.com" for i in range(8)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            users = list(pool.map(lambda email: provider.register(email, "pw")[0], emails))
        for email, user in zip(emails, users):
            assert provider.sign_in(email, "pw")[0] == user

    def test_save_leaves_no_temp_files(self, provider, tmp_path):
        provider.register("driver@example.com", "hunter2")
        provider.register("other@example.com", "hunter2")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["accounts.yaml"]


class TestSubscriptions:
    """Tests for session-change notifications."""

    def test_first_notification_is_immediate(self, provider):
        user, credential = provider.register("driver@example.com", "hunter2")
        seen = []
        provider.subscribe(credential, seen.append)
        assert seen == [user]

    def test_sign_out_notifies_subscribers_of_that_session(self, provider):
        _, credential = provider.register("a@example.com", "pw")
        _, other = provider.register("b@example.com", "pw")
        seen, other_seen = [], []
        provider.subscribe(credential, seen.append)
        provider.subscribe(other, other_seen.append)
        provider.sign_out(credential)
        assert seen[-1] is None
        assert other_seen[-1] is not None

    def test_unsubscribe_stops_notifications(self, provider):
        _, credential = provider.register("a@example.com", "pw")
        seen = []
        unsubscribe = provider.subscribe(credential, seen.append)
        unsubscribe()
        provider.sign_out(credential)
        assert len(seen) == 1


class TestAuthContext:
    """Tests for AuthContext lifecycle."""

    def test_user_unavailable_before_start(self, provider):
        context = AuthContext(provider)
        assert not context.ready
        with pytest.raises(AuthNotReady):
            context.user

    def test_resolves_user(self, provider):
        user, credential = provider.register("driver@example.com", "hunter2")
        with AuthContext(provider).start(credential) as context:
            assert context.ready
            assert context.user == user

    def test_no_credential_resolves_to_none(self, provider):
        context = AuthContext(provider).start(None)
        assert context.ready
        assert context.user is None

    def test_sign_out_clears_user(self, provider):
        _, credential = provider.register("driver@example.com", "hunter2")
        context = AuthContext(provider).start(credential)
        provider.sign_out(credential)
        assert context.user is None

    def test_close_unsubscribes(self, provider):
        user, credential = provider.register("driver@example.com", "hunter2")
        context = AuthContext(provider).start(credential)
        context.close()
        provider.sign_out(credential)
        assert context.user == user

    def test_cannot_start_twice(self, provider):
        context = AuthContext(provider).start(None)
        with pytest.raises(RuntimeError):
            context.start(None)
