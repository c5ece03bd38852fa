"""Identity provider and the per-session auth context.

The provider keeps accounts in a YAML file and issues signed JWT session
credentials. Views never talk to it directly: they read the current user
from an AuthContext, which subscribes to the provider's session-change
notifications for one credential.
"""

import itertools
import logging
import os
import tempfile
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Union

import jwt
import yaml
from flask_bcrypt import Bcrypt

from .errors import AuthError, AuthNotReady, StoreError
from .store import ENCODING, FILE_ERRORS

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = 24 * 60 * 60

Listener = Callable[[Optional["User"]], None]


@dataclass(frozen=True)
class User:
    """A signed-in user. ``uid`` scopes every vehicle record they own."""

    uid: str
    email: str


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class IdentityProvider:
    """Account registry, credential issuer and session-change publisher."""

    def __init__(
        self,
        accounts_file: Union[str, Path],
        secret_key: str,
        token_ttl: int = DEFAULT_TOKEN_TTL,
        bcrypt: Optional[Bcrypt] = None,
    ):
        self.accounts_file = Path(accounts_file)
        self.secret_key = secret_key
        self.token_ttl = token_ttl
        self.bcrypt = bcrypt or Bcrypt()
        self._listeners: Dict[int, Tuple[Optional[str], Listener]] = {}
        self._ids = itertools.count(1)
        # Serializes read-modify-write of the accounts file
        self._accounts_lock = threading.Lock()

    # -- accounts ---------------------------------------------------------

    def _load_accounts(self) -> Dict[str, Dict[str, str]]:
        try:
            with open(self.accounts_file, "r", encoding=ENCODING) as fp:
                return yaml.load(fp, Loader=yaml.SafeLoader) or {}
        except FileNotFoundError:
            return {}
        except FILE_ERRORS as e:
            raise StoreError(f"Failed to read accounts: {e}") from e

    def _save_accounts(self, accounts: Dict[str, Dict[str, str]]) -> None:
        """Write the registry to a temp file and move it into place, so readers
        never see a half-written file."""
        parent = self.accounts_file.parent
        tmp_name = None
        try:
            parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding=ENCODING, dir=parent, suffix=".tmp", delete=False
            ) as fp:
                tmp_name = fp.name
                yaml.dump(accounts, fp, default_flow_style=False, sort_keys=True)
            os.replace(tmp_name, self.accounts_file)
        except FILE_ERRORS as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StoreError(f"Failed to write accounts: {e}") from e

    def register(self, email: str, password: str) -> Tuple[User, str]:
        """Create an account and return it with a fresh session credential."""
        email = normalize_email(email)
        if not email or not password:
            raise AuthError("Email and password are required")
        uid = uuid.uuid4().hex
        password_hash = self.bcrypt.generate_password_hash(password).decode("utf-8")
        with self._accounts_lock:
            accounts = self._load_accounts()
            if email in accounts:
                raise AuthError("An account with that email already exists")
            accounts[email] = {"uid": uid, "passwordHash": password_hash}
            self._save_accounts(accounts)
        logger.info("Registered user %s", uid)
        user = User(uid=uid, email=email)
        return user, self.issue_credential(user)

    def sign_in(self, email: str, password: str) -> Tuple[User, str]:
        """Check a password and return the user with a fresh session credential."""
        email = normalize_email(email)
        account = self._load_accounts().get(email)
        if account is None or not password:
            raise AuthError("Invalid email or password")
        if not self.bcrypt.check_password_hash(account["passwordHash"], password):
            raise AuthError("Invalid email or password")
        user = User(uid=account["uid"], email=email)
        return user, self.issue_credential(user)

    def _find_user(self, uid: str) -> Optional[User]:
        for email, account in self._load_accounts().items():
            if account.get("uid") == uid:
                return User(uid=uid, email=email)
        return None

    # -- credentials ------------------------------------------------------

    def issue_credential(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user.uid,
            "iat": now,
            "exp": now + timedelta(seconds=self.token_ttl),
        }
        return jwt.encode(payload, self.secret_key, algorithm=JWT_ALGORITHM)

    def resolve(self, credential: Optional[str]) -> Optional[User]:
        """The user a credential belongs to; None if absent, invalid or expired."""
        if not credential:
            return None
        try:
            payload = jwt.decode(credential, self.secret_key, algorithms=[JWT_ALGORITHM])
        except jwt.InvalidTokenError as e:
            logger.info("Rejected session credential: %s", e)
            return None
        try:
            return self._find_user(payload.get("sub", ""))
        except StoreError:
            # Consumers treat "no user" as "sign in again"
            logger.exception("Could not resolve session credential")
            return None

    # -- session notifications -------------------------------------------

    def subscribe(self, credential: Optional[str], listener: Listener) -> Callable[[], None]:
        """
        Register for session changes of one credential.

        The listener is called once right away with the resolved user (or
        None) and again whenever that session changes. Returns a function
        that removes the subscription.
        """
        key = next(self._ids)
        self._listeners[key] = (credential, listener)
        listener(self.resolve(credential))

        def unsubscribe() -> None:
            self._listeners.pop(key, None)

        return unsubscribe

    def sign_out(self, credential: Optional[str]) -> None:
        """End a session: every subscriber of that credential is told 'no user'."""
        for cred, listener in list(self._listeners.values()):
            if cred == credential:
                listener(None)


class AuthContext:
    """
    Holds "current user or none" for one session.

    Until the provider's first notification arrives the context is not
    ready and reading ``user`` raises AuthNotReady.
    """

    def __init__(self, provider: IdentityProvider):
        self.provider = provider
        self.ready = False
        self._user: Optional[User] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    def start(self, credential: Optional[str]) -> "AuthContext":
        if self._unsubscribe is not None:
            raise RuntimeError("AuthContext already started")
        self._unsubscribe = self.provider.subscribe(credential, self._on_session_changed)
        return self

    def _on_session_changed(self, user: Optional[User]) -> None:
        self._user = user
        self.ready = True

    @property
    def user(self) -> Optional[User]:
        if not self.ready:
            raise AuthNotReady("Session has not been resolved yet")
        return self._user

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> "AuthContext":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
