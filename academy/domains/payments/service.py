from sqlalchemy.orm import Session

from academy.core.db import utcnow
from academy.core.errors import NotFound
from academy.domains.payments.models import ADMIN_MOBILE_KEY, AppSetting, BankAccount
from academy.utils.phone import normalize_mobile


def list_bank_accounts(db: Session, *, active_only: bool) -> list[BankAccount]:
    q = db.query(BankAccount)
    if active_only:
        q = q.filter(BankAccount.is_active.is_(True))
    return q.order_by(BankAccount.created_at.asc()).all()


def _get_account(db: Session, account_id: str) -> BankAccount:
    account = db.get(BankAccount, account_id)
    if account is None:
        raise NotFound("Bank account not found")
    return account


def create_bank_account(db: Session, *, bank_name: str, account_name: str, account_number: str, branch: str | None) -> BankAccount:
    account = BankAccount(
        bank_name=bank_name.strip(),
        account_name=account_name.strip(),
        account_number=account_number.strip(),
        branch=(branch or "").strip() or None,
        is_active=True,
    )
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


def update_bank_account(
    db: Session, account_id: str, *, bank_name: str, account_name: str, account_number: str, branch: str | None
) -> BankAccount:
    account = _get_account(db, account_id)
    account.bank_name = bank_name.strip()
    account.account_name = account_name.strip()
    account.account_number = account_number.strip()
    account.branch = (branch or "").strip() or None
    db.commit()
    db.refresh(account)
    return account


def set_bank_account_active(db: Session, account_id: str, is_active: bool) -> BankAccount:
    account = _get_account(db, account_id)
    account.is_active = is_active
    db.commit()
    db.refresh(account)
    return account


def delete_bank_account(db: Session, account_id: str) -> None:
    account = _get_account(db, account_id)
    db.delete(account)
    db.commit()


def get_setting(db: Session, key: str) -> str | None:
    row = db.get(AppSetting, key)
    return row.value if row else None


def set_setting(db: Session, key: str, value: str | None) -> AppSetting:
    row = db.get(AppSetting, key)
    if row is None:
        row = AppSetting(key=key)
        db.add(row)
    row.value = value
    row.updated_at = utcnow()
    db.commit()
    db.refresh(row)
    return row


def get_admin_mobile(db: Session) -> str | None:
    return get_setting(db, ADMIN_MOBILE_KEY) or None


def set_admin_mobile(db: Session, raw: str) -> str:
    number = normalize_mobile(raw)
    set_setting(db, ADMIN_MOBILE_KEY, number)
    return number
