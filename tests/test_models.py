"""Tests for the shared account columns on every principal table."""

import pytest
from sqlalchemy import select

from bizdesk.models.account import AccountMixin
from bizdesk.models.admin import Admin
from bizdesk.models.client import Client
from bizdesk.models.employee import Employee
from bizdesk.models.user import User

ACCOUNT_COLUMNS = {
    "id",
    "email",
    "hashed_password",
    "is_active",
    "is_email_verified",
    "login_attempts",
    "lock_until",
    "last_login",
    "created_at",
    "updated_at",
}


@pytest.mark.parametrize("model", [User, Client, Employee, Admin])
def test_every_principal_table_carries_account_columns(model):
    assert issubclass(model, AccountMixin)
    assert ACCOUNT_COLUMNS <= set(model.__table__.columns.keys())
    assert model.__table__.columns["email"].unique
    assert not model.__table__.columns["hashed_password"].nullable


@pytest.mark.parametrize("model", [User, Client, Employee, Admin])
def test_mixin_columns_are_not_shared_between_tables(model):
    assert model.__table__.columns["id"].table is model.__table__


@pytest.mark.asyncio
async def test_mixin_columns_round_trip(create_employee, db_session):
    employee = await create_employee()
    row = (
        await db_session.execute(
            select(Employee.email, Employee.login_attempts, Employee.is_active)
            .where(Employee.id == employee.id)
        )
    ).one()
    assert row == ("ann@example.com", 0, True)
