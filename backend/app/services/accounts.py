"""
Account lookup helpers.

Passengers, drivers and admins live in separate tables; these helpers give
the rest of the application a single view over them.
"""

from typing import Optional, Tuple, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, union_all, literal_column

from backend.app.models.passenger import Passenger
from backend.app.models.driver import Driver
from backend.app.models.admin import Admin
from backend.app.models.enums import AccountType


ACCOUNT_MODELS = {
    AccountType.PASSENGER: Passenger,
    AccountType.DRIVER: Driver,
    AccountType.ADMIN: Admin,
}


def _email_lookup(email: str):
    """UNION over the three account tables, yielding (id, type) rows."""
    return union_all(
        select(Passenger.id.label("id"), literal_column("'passenger'").label("type")).where(Passenger.email == email),
        select(Driver.id.label("id"), literal_column("'driver'").label("type")).where(Driver.email == email),
        select(Admin.id.label("id"), literal_column("'admin'").label("type")).where(Admin.email == email),
    )


async def get_account(db: AsyncSession, account_type: AccountType, account_id: int) -> Optional[Any]:
    """Load an account row by identity type and id."""
    model = ACCOUNT_MODELS[AccountType(account_type)]
    result = await db.execute(select(model).where(model.id == account_id))
    return result.scalar_one_or_none()


async def find_account_by_email(db: AsyncSession, email: str) -> Optional[Tuple[AccountType, Any]]:
    """
    Find an account by email across all account tables.

    Returns:
        (account_type, account) or None if no table has the email
    """
    row = (await db.execute(_email_lookup(email))).first()
    if row is None:
        return None

    account_type = AccountType(row.type)
    account = await get_account(db, account_type, row.id)
    return account_type, account


async def email_in_use(db: AsyncSession, email: str) -> bool:
    """True if any passenger, driver or admin already uses this email."""
    row = (await db.execute(_email_lookup(email))).first()
    return row is not None


async def phone_in_use(db: AsyncSession, model, phone: str, exclude_id: Optional[int] = None) -> bool:
    """True if another row of ``model`` already uses this phone number."""
    query = select(model.id).where(model.phone == phone)
    if exclude_id is not None:
        query = query.where(model.id != exclude_id)
    return (await db.execute(query.limit(1))).first() is not None
