"""LedgerRepository: concrete implementation of LedgerRepositoryProtocol.

All balance-mutating operations are single atomic PostgreSQL UPDATE ... RETURNING
statements (no read-then-write). A debit returning 0 rows means the account is
missing, its balance is unknown (NULL), or it is below the amount.

Transaction ownership: the CALLER (state machine / application service) owns the
unit of work; nothing here commits.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_common.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvariantViolationError,
)
from src.mb_ledger.domain.models import Account

_ACCOUNT_COLUMNS = """
    id, owner_id, name, provider, account_type, balance,
    balance_synced_at, created_at, updated_at
"""

_GET_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE id = CAST(:account_id AS UUID)
""")

# Serializes account removal against savings being opened on the same account.
_LOCK_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE id = CAST(:account_id AS UUID)
    FOR UPDATE
""")

_LIST_ACCOUNTS_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE owner_id = :owner_id
    ORDER BY created_at ASC, id ASC
""")

_INSERT_ACCOUNT_SQL = text(f"""
    INSERT INTO accounts (owner_id, name, provider, account_type, balance, balance_synced_at)
    VALUES (:owner_id, :name, :provider, :account_type, :balance,
            CASE WHEN CAST(:balance AS BIGINT) IS NULL THEN NULL ELSE NOW() END)
    RETURNING {_ACCOUNT_COLUMNS}
""")

_DELETE_ACCOUNT_SQL = text("""
    DELETE FROM accounts
    WHERE id = CAST(:account_id AS UUID)
    RETURNING id
""")

_DEBIT_SQL = text(f"""
    UPDATE accounts
    SET balance = balance - :amount,
        updated_at = NOW()
    WHERE id = CAST(:account_id AS UUID)
      AND balance IS NOT NULL
      AND balance >= :amount
    RETURNING {_ACCOUNT_COLUMNS}
""")

# NULL (unknown) balance is treated as 0 before crediting
_CREDIT_SQL = text(f"""
    UPDATE accounts
    SET balance = COALESCE(balance, 0) + :amount,
        updated_at = NOW()
    WHERE id = CAST(:account_id AS UUID)
    RETURNING {_ACCOUNT_COLUMNS}
""")

_SET_BALANCE_SQL = text(f"""
    UPDATE accounts
    SET balance = :balance,
        balance_synced_at = NOW(),
        updated_at = NOW()
    WHERE id = CAST(:account_id AS UUID)
    RETURNING {_ACCOUNT_COLUMNS}
""")


def _row_to_account(row: object) -> Account:
    return Account(
        id=str(row.id),  # type: ignore[attr-defined]
        owner_id=row.owner_id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        provider=row.provider,  # type: ignore[attr-defined]
        account_type=row.account_type,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        balance_synced_at=row.balance_synced_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _require_positive(operation: str, amount: int) -> None:
    if amount <= 0:
        raise InvariantViolationError(f"{operation} amount must be > 0, got {amount}")


class LedgerRepository:
    """Concrete repository, all operations atomic at the SQL level."""

    async def get_account(self, db: AsyncSession, account_id: str) -> Account | None:
        result = await db.execute(_GET_ACCOUNT_SQL, {"account_id": account_id})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def get_account_for_update(self, db: AsyncSession, account_id: str) -> Account | None:
        result = await db.execute(_LOCK_ACCOUNT_SQL, {"account_id": account_id})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def list_accounts(self, db: AsyncSession, owner_id: str) -> list[Account]:
        result = await db.execute(_LIST_ACCOUNTS_SQL, {"owner_id": owner_id})
        return [_row_to_account(row) for row in result.fetchall()]

    async def create_account(
        self,
        db: AsyncSession,
        owner_id: str,
        name: str,
        provider: str,
        account_type: str,
        balance: int | None,
    ) -> Account:
        result = await db.execute(
            _INSERT_ACCOUNT_SQL,
            {
                "owner_id": owner_id,
                "name": name,
                "provider": provider,
                "account_type": account_type,
                "balance": balance,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InvariantViolationError("Account insert returned no rows")
        return _row_to_account(row)

    async def delete_account(self, db: AsyncSession, account_id: str) -> bool:
        result = await db.execute(_DELETE_ACCOUNT_SQL, {"account_id": account_id})
        return result.fetchone() is not None

    async def debit(self, db: AsyncSession, account_id: str, amount: int) -> Account:
        _require_positive("debit", amount)
        result = await db.execute(_DEBIT_SQL, {"account_id": account_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            current = await self.get_account(db, account_id)
            if current is None:
                raise AccountNotFoundError(account_id)
            raise InsufficientFundsError(amount, current.balance)
        return _row_to_account(row)

    async def credit(self, db: AsyncSession, account_id: str, amount: int) -> Account:
        _require_positive("credit", amount)
        result = await db.execute(_CREDIT_SQL, {"account_id": account_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise AccountNotFoundError(account_id)
        return _row_to_account(row)

    async def set_balance(
        self, db: AsyncSession, account_id: str, balance: int | None
    ) -> Account:
        if balance is not None and balance < 0:
            raise InvariantViolationError(f"synced balance must be >= 0, got {balance}")
        result = await db.execute(
            _SET_BALANCE_SQL, {"account_id": account_id, "balance": balance}
        )
        row = result.fetchone()
        if row is None:
            raise AccountNotFoundError(account_id)
        return _row_to_account(row)
