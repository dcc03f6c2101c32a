"""User model: credentials, role and the failed-login lockout state."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import check_password_hash, generate_password_hash

from samplecat.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .refresh_token import RefreshToken
    from .sample import Sample

# Consecutive failures that lock an account until explicitly reset.
MAX_FAILED_LOGIN_ATTEMPTS = 5


class Role(str, Enum):
    """Authorization role carried on the user and in access tokens."""

    USER = "USER"
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Registered account.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    username : str
        Public handle and token subject. Case is preserved.
    password_hash : str
        Hashed password (write-only setter via ``password``).
    role : Role
        ``USER`` on registration.
    enabled : bool
        Disabled accounts cannot log in.
    account_locked : bool
        Set automatically once ``failed_login_attempts`` reaches
        :data:`MAX_FAILED_LOGIN_ATTEMPTS`; cleared only by
        :meth:`reset_failed_login_attempts`.
    failed_login_attempts : int
        Consecutive failed password checks.
    last_login : datetime | None
        Time of the last successful login.
    profile_image_url, profile_image_id : str | None
        Public URL and store id of the profile picture.
    """

    __tablename__ = "users"
    __repr_attrs__ = ("username",)

    # Columns
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    profile_image_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[Role] = mapped_column(
        SAEnum(Role, name="user_role", native_enum=False, length=20),
        nullable=False,
        default=Role.USER,
    )
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    account_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    failed_login_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # ---------------- Relationships ----------------
    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    samples: Mapped[list[Sample]] = relationship(
        "Sample",
        back_populates="owner",
        cascade="all, delete-orphan",
        order_by="[Sample.created_at.desc(), Sample.id.desc()]",
    )

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
        Index("ix_users_email", "email"),
        Index("ix_users_username", "username"),
    )

    def __init__(self, **kwargs: Any) -> None:
        # Column defaults only apply at INSERT; mirror them for transient objects.
        # The counter goes last so its validator can lock the account.
        attempts = kwargs.pop("failed_login_attempts", 0)
        kwargs.setdefault("role", Role.USER)
        kwargs.setdefault("enabled", True)
        kwargs.setdefault("account_locked", False)
        super().__init__(**kwargs)
        self.failed_login_attempts = attempts

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password.

        :param raw: Plain text password to hash.
        :type raw: str
        """
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash.

        :param raw: Plain text password candidate.
        :type raw: str
        :returns: ``True`` if it matches; otherwise ``False``.
        :rtype: bool
        """
        if not self.password_hash or not raw:
            return False
        return bool(check_password_hash(self.password_hash, raw))

    # -------------------- Lockout API --------------------
    def increment_failed_login_attempts(self) -> None:
        """Record one failed password check; locks at the threshold."""
        self.failed_login_attempts = (self.failed_login_attempts or 0) + 1

    def reset_failed_login_attempts(self) -> None:
        """Zero the counter and clear the lock."""
        self.failed_login_attempts = 0
        self.account_locked = False

    def update_last_login(self, when: datetime | None = None) -> None:
        self.last_login = when or datetime.now(timezone.utc)

    @property
    def is_locked(self) -> bool:
        return bool(self.account_locked)

    @property
    def is_enabled(self) -> bool:
        return bool(self.enabled)

    # -------------------- Validators --------------------
    @validates("failed_login_attempts")
    def _lock_on_threshold(self, key: str, value: int) -> int:
        """
        Keep ``failed_login_attempts >= threshold`` implying ``account_locked``.

        :raises ValueError: If ``value`` is negative.
        """
        value = int(value or 0)
        if value < 0:
            raise ValueError("failed_login_attempts cannot be negative.")
        if value >= MAX_FAILED_LOGIN_ATTEMPTS:
            self.account_locked = True
        return value

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        """Trim the username; case is significant and kept as given."""
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Username is required.")
        return value.strip()
