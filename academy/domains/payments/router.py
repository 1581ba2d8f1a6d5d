from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from academy.core.deps import get_db, require_admin
from academy.core.security import Principal
from academy.domains.payments.models import BankAccount
from academy.domains.payments.schemas import (
    AdminMobileIn,
    AdminMobileOut,
    BankAccountActiveIn,
    BankAccountIn,
    BankAccountListOut,
    BankAccountOut,
)
from academy.domains.payments.service import (
    create_bank_account,
    delete_bank_account,
    get_admin_mobile,
    list_bank_accounts,
    set_admin_mobile,
    set_bank_account_active,
    update_bank_account,
)


router = APIRouter()


def _out(account: BankAccount) -> BankAccountOut:
    return BankAccountOut(
        id=account.id,
        bank_name=account.bank_name,
        account_name=account.account_name,
        account_number=account.account_number,
        branch=account.branch,
        is_active=account.is_active,
    )


@router.get("/bank-accounts", response_model=BankAccountListOut)
def public_bank_accounts(db: Session = Depends(get_db)) -> BankAccountListOut:
    """Accounts students transfer course fees to."""
    return BankAccountListOut(accounts=[_out(a) for a in list_bank_accounts(db, active_only=True)])


@router.get("/admin/bank-accounts", response_model=BankAccountListOut)
def admin_bank_accounts(_admin: Principal = Depends(require_admin), db: Session = Depends(get_db)) -> BankAccountListOut:
    return BankAccountListOut(accounts=[_out(a) for a in list_bank_accounts(db, active_only=False)])


@router.post("/admin/bank-accounts", response_model=BankAccountOut, status_code=status.HTTP_201_CREATED)
def admin_create_bank_account(
    payload: BankAccountIn,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> BankAccountOut:
    return _out(create_bank_account(db, **payload.model_dump()))


@router.put("/admin/bank-accounts/{account_id}", response_model=BankAccountOut)
def admin_update_bank_account(
    account_id: str,
    payload: BankAccountIn,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> BankAccountOut:
    return _out(update_bank_account(db, account_id, **payload.model_dump()))


@router.post("/admin/bank-accounts/{account_id}/active", response_model=BankAccountOut)
def admin_toggle_bank_account(
    account_id: str,
    payload: BankAccountActiveIn,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> BankAccountOut:
    return _out(set_bank_account_active(db, account_id, payload.is_active))


@router.delete("/admin/bank-accounts/{account_id}")
def admin_delete_bank_account(
    account_id: str,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    delete_bank_account(db, account_id)
    return {"success": True}


@router.get("/admin/settings/admin-mobile", response_model=AdminMobileOut)
def admin_mobile_get(_admin: Principal = Depends(require_admin), db: Session = Depends(get_db)) -> AdminMobileOut:
    return AdminMobileOut(admin_mobile_number=get_admin_mobile(db))


@router.put("/admin/settings/admin-mobile", response_model=AdminMobileOut)
def admin_mobile_put(
    payload: AdminMobileIn,
    _admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> AdminMobileOut:
    return AdminMobileOut(admin_mobile_number=set_admin_mobile(db, payload.admin_mobile_number) or None)
