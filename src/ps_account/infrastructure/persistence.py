"""AccountRepository — concrete implementation of AccountRepositoryProtocol.

All balance-mutating operations use atomic PostgreSQL UPDATE ... RETURNING.
A result of 0 rows means a business constraint was violated (insufficient
funds, closed account).

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_account.domain.models import Account, LedgerEntry
from src.ps_common.amounts import BIGINT_MAX
from src.ps_common.enums import LedgerEntryType
from src.ps_common.errors import (
    AccountNotFoundError,
    BalanceLimitError,
    InsufficientBalanceError,
    InternalError,
    TransferFailureError,
)

_ACCOUNT_COLUMNS = "identity, available_balance, is_active, version, created_at, updated_at"

_GET_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE identity = :identity
""")

# Deposit opens the account on first use and reopens a closed one.
# Balances are BIGINT; the WHERE keeps the sum inside the column's range.
_DEPOSIT_SQL = text(f"""
    INSERT INTO accounts (identity, available_balance, is_active)
    VALUES (:identity, :amount, TRUE)
    ON CONFLICT (identity) DO UPDATE
        SET available_balance = accounts.available_balance + EXCLUDED.available_balance,
            is_active = TRUE,
            version = accounts.version + 1,
            updated_at = NOW()
        WHERE accounts.available_balance <= {BIGINT_MAX} - EXCLUDED.available_balance
    RETURNING {_ACCOUNT_COLUMNS}
""")

_DEBIT_SQL = text(f"""
    UPDATE accounts
    SET available_balance = available_balance - :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE identity = :identity AND is_active AND available_balance >= :amount
    RETURNING {_ACCOUNT_COLUMNS}
""")

_CREDIT_SQL = text(f"""
    UPDATE accounts
    SET available_balance = available_balance + :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE identity = :identity AND is_active
      AND available_balance <= {BIGINT_MAX} - :amount
    RETURNING {_ACCOUNT_COLUMNS}
""")

_CLOSE_SQL = text(f"""
    UPDATE accounts
    SET is_active = FALSE,
        version = version + 1,
        updated_at = NOW()
    WHERE identity = :identity
    RETURNING {_ACCOUNT_COLUMNS}
""")

_INSERT_LEDGER_SQL = text("""
    INSERT INTO ledger_entries
        (identity, entry_type, amount, balance_after,
         reference_type, reference_id, description)
    VALUES
        (:identity, :entry_type, :amount, :balance_after,
         :reference_type, :reference_id, :description)
    RETURNING id, identity, entry_type, amount, balance_after,
              reference_type, reference_id, description, created_at
""")

_LIST_LEDGER_SQL = text("""
    SELECT id, identity, entry_type, amount, balance_after,
           reference_type, reference_id, description, created_at
    FROM ledger_entries
    WHERE identity = :identity
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
      AND (CAST(:entry_type AS VARCHAR) IS NULL OR entry_type = :entry_type)
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_account(row: object) -> Account:
    return Account(
        identity=row.identity,  # type: ignore[attr-defined]
        available_balance=row.available_balance,  # type: ignore[attr-defined]
        is_active=row.is_active,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_ledger(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        identity=row.identity,  # type: ignore[attr-defined]
        entry_type=row.entry_type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        reference_type=row.reference_type,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class AccountRepository:
    """Concrete repository — every mutation is one atomic SQL statement plus its ledger row."""

    async def get_account(self, db: AsyncSession, identity: str) -> Account | None:
        result = await db.execute(_GET_ACCOUNT_SQL, {"identity": identity})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def deposit(
        self, db: AsyncSession, identity: str, amount: int
    ) -> tuple[Account, LedgerEntry]:
        if amount > BIGINT_MAX:
            raise BalanceLimitError(identity, amount)
        result = await db.execute(_DEPOSIT_SQL, {"identity": identity, "amount": amount})
        row = result.fetchone()
        if row is None:
            # Only the overflow guard on the conflict branch can skip the upsert.
            raise BalanceLimitError(identity, amount)
        account = _row_to_account(row)
        entry = await self._write_ledger(
            db, account, LedgerEntryType.DEPOSIT, amount, "WALLET", None, "Wallet deposit"
        )
        return account, entry

    async def withdraw(
        self, db: AsyncSession, identity: str, amount: int
    ) -> tuple[Account, LedgerEntry]:
        account = await self._debit(db, identity, amount)
        entry = await self._write_ledger(
            db, account, LedgerEntryType.WITHDRAW, -amount, "WALLET", None, "Wallet withdrawal"
        )
        return account, entry

    async def debit_stake(
        self, db: AsyncSession, identity: str, amount: int, prediction_id: int
    ) -> tuple[Account, LedgerEntry]:
        account = await self._debit(db, identity, amount)
        entry = await self._write_ledger(
            db,
            account,
            LedgerEntryType.STAKE_DEBIT,
            -amount,
            "PREDICTION",
            str(prediction_id),
            f"Stake on prediction {prediction_id}",
        )
        return account, entry

    async def credit_payout(
        self, db: AsyncSession, identity: str, amount: int, prediction_id: int
    ) -> tuple[Account, LedgerEntry]:
        row = None
        if amount <= BIGINT_MAX:
            result = await db.execute(_CREDIT_SQL, {"identity": identity, "amount": amount})
            row = result.fetchone()
        if row is None:
            existing = await self.get_account(db, identity)
            if existing is None:
                reason = "no account"
            elif not existing.is_active:
                reason = "account closed"
            else:
                reason = "balance limit"
            raise TransferFailureError(identity, reason)
        account = _row_to_account(row)
        entry = await self._write_ledger(
            db,
            account,
            LedgerEntryType.SETTLEMENT_PAYOUT,
            amount,
            "PREDICTION",
            str(prediction_id),
            f"Payout from prediction {prediction_id}",
        )
        return account, entry

    async def close(self, db: AsyncSession, identity: str) -> Account:
        result = await db.execute(_CLOSE_SQL, {"identity": identity})
        row = result.fetchone()
        if row is None:
            raise AccountNotFoundError(identity)
        return _row_to_account(row)

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        identity: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_LEDGER_SQL,
            {
                "identity": identity,
                "cursor_id": cursor_id,
                "entry_type": entry_type,
                "limit": limit,
            },
        )
        return [_row_to_ledger(row) for row in result.fetchall()]

    async def _debit(self, db: AsyncSession, identity: str, amount: int) -> Account:
        row = None
        # No BIGINT balance can cover more than BIGINT_MAX; skip the bind that would overflow.
        if amount <= BIGINT_MAX:
            result = await db.execute(_DEBIT_SQL, {"identity": identity, "amount": amount})
            row = result.fetchone()
        if row is None:
            existing = await self.get_account(db, identity)
            available = existing.available_balance if existing and existing.is_active else 0
            raise InsufficientBalanceError(amount, available)
        return _row_to_account(row)

    async def _write_ledger(
        self,
        db: AsyncSession,
        account: Account,
        entry_type: LedgerEntryType,
        amount: int,
        reference_type: str,
        reference_id: str | None,
        description: str,
    ) -> LedgerEntry:
        result = await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "identity": account.identity,
                "entry_type": entry_type.value,
                "amount": amount,
                "balance_after": account.available_balance,
                "reference_type": reference_type,
                "reference_id": reference_id,
                "description": description,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Ledger insert returned no rows — this should never happen")
        return _row_to_ledger(row)
