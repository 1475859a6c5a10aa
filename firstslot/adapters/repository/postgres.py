"""
PostgreSQL repository adapter - Implements UserRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Slot Claim Design:
------------------
Confirming an OTP and taking an access slot happen in one transaction:

1. **SELECT ... FOR UPDATE** on the user row serializes concurrent
   confirmations of the same user, so an OTP can only be redeemed once.

2. **Conditional increment** of the single-row ``slot_counter``
   (``UPDATE ... WHERE verified_count < max RETURNING verified_count``).
   Concurrent claims block on the counter row and re-evaluate the WHERE
   clause against the committed value, so two requests can never both
   take the last slot. The returned value minus one is the user's
   registration order.

3. If no counter row is returned the limit was already reached and the
   user row is deleted in the same transaction.

Lock order is always user row then counter row.

Uniqueness of email and mobile is enforced by named UNIQUE constraints;
violations are translated into the matching domain exception.
"""

import logging
from datetime import datetime
from pathlib import Path
from uuid import UUID

from psycopg import errors
from psycopg_pool import ConnectionPool

from firstslot.domain.exceptions import DuplicateEmailError, DuplicateMobileError
from firstslot.domain.otp import otp_matches
from firstslot.domain.ports import ConfirmResult, ConfirmStatus, User

logger = logging.getLogger(__name__)

_USER_COLUMNS = """
    id, name, email, mobile, password_hash, is_verified,
    otp_code, otp_expires_at, registration_order, created_at
"""

_EMAIL_CONSTRAINT = "users_email_key"
_MOBILE_CONSTRAINT = "users_mobile_key"


def _row_to_user(row: tuple) -> User:
    return User(
        id=row[0],
        name=row[1],
        email=row[2],
        mobile=row[3],
        password_hash=row[4],
        is_verified=row[5],
        otp_code=row[6],
        otp_expires_at=row[7],
        registration_order=row[8],
        created_at=row[9],
    )


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def get(self, user_id: UUID) -> User | None:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (user_id,))
            row = cursor.fetchone()
        return _row_to_user(row) if row is not None else None

    def find_by_email_or_mobile(self, email: str, mobile: str) -> list[User]:
        sql = f"""
            SELECT {_USER_COLUMNS} FROM users
            WHERE email = %s OR mobile = %s
            ORDER BY created_at
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email, mobile))
            rows = cursor.fetchall()
        return [_row_to_user(row) for row in rows]

    def insert(self, user: User) -> None:
        """
        Insert a new unverified user.

        The UNIQUE constraints on email and mobile make concurrent signups
        with the same identity safe: exactly one insert wins, the others
        surface as DuplicateEmailError / DuplicateMobileError.
        """
        sql = """
            INSERT INTO users (
                id, name, email, mobile, password_hash, is_verified,
                otp_code, otp_expires_at, created_at
            )
            VALUES (%s, %s, %s, %s, %s, FALSE, %s, %s, %s)
        """

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(
                    sql,
                    (
                        user.id,
                        user.name,
                        user.email,
                        user.mobile,
                        user.password_hash,
                        user.otp_code,
                        user.otp_expires_at,
                        user.created_at,
                    ),
                )
                conn.commit()
        except errors.UniqueViolation as e:
            constraint = e.diag.constraint_name or ""
            logger.info("Insert rejected by constraint %s", constraint)
            if constraint == _EMAIL_CONSTRAINT:
                raise DuplicateEmailError() from None
            if constraint == _MOBILE_CONSTRAINT:
                raise DuplicateMobileError() from None
            raise

    def save_otp(self, user_id: UUID, code: str, expires_at: datetime) -> bool:
        sql = """
            UPDATE users
            SET otp_code = %s, otp_expires_at = %s
            WHERE id = %s AND is_verified = FALSE
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (code, expires_at, user_id))
            conn.commit()
            return cursor.rowcount == 1

    def confirm_verification(
        self, user_id: UUID, code: str, max_users: int, now: datetime
    ) -> ConfirmResult:
        """
        Verify the OTP and claim an access slot in one transaction.

        Args:
            user_id: User to confirm
            code: Submitted OTP
            max_users: Slot limit
            now: Reference time for the OTP expiry check

        Returns:
            ConfirmResult with the registration order when CONFIRMED
        """
        select_sql = """
            SELECT is_verified, otp_code, otp_expires_at
            FROM users
            WHERE id = %s
            FOR UPDATE
        """

        claim_sql = """
            UPDATE slot_counter
            SET verified_count = verified_count + 1
            WHERE id = 1 AND verified_count < %s
            RETURNING verified_count
        """

        verify_sql = """
            UPDATE users
            SET is_verified = TRUE,
                otp_code = NULL,
                otp_expires_at = NULL,
                registration_order = %s,
                verified_at = NOW()
            WHERE id = %s
        """

        delete_sql = "DELETE FROM users WHERE id = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(select_sql, (user_id,))
            row = cursor.fetchone()

            if row is None:
                conn.commit()
                return ConfirmResult(ConfirmStatus.NOT_FOUND)

            is_verified, stored_code, expires_at = row

            if is_verified:
                conn.commit()
                return ConfirmResult(ConfirmStatus.ALREADY_VERIFIED)

            if not otp_matches(stored_code, expires_at, code, now):
                conn.commit()
                return ConfirmResult(ConfirmStatus.INVALID_OTP)

            cursor.execute(claim_sql, (max_users,))
            claimed = cursor.fetchone()

            if claimed is None:
                # Limit reached: the late user's record is removed entirely
                cursor.execute(delete_sql, (user_id,))
                conn.commit()
                return ConfirmResult(ConfirmStatus.SLOTS_EXHAUSTED)

            registration_order = claimed[0] - 1
            cursor.execute(verify_sql, (registration_order, user_id))
            conn.commit()
            return ConfirmResult(ConfirmStatus.CONFIRMED, registration_order)

    def verified_count(self) -> int:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT verified_count FROM slot_counter WHERE id = 1")
            row = cursor.fetchone()
        return row[0] if row is not None else 0


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: firstslot/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
