from pydantic import BaseModel, Field


class BankAccountIn(BaseModel):
    bank_name: str = Field(min_length=1, max_length=128)
    account_name: str = Field(min_length=1, max_length=128)
    account_number: str = Field(min_length=1, max_length=64)
    branch: str | None = Field(default=None, max_length=128)


class BankAccountActiveIn(BaseModel):
    is_active: bool


class BankAccountOut(BaseModel):
    id: str
    bank_name: str
    account_name: str
    account_number: str
    branch: str | None = None
    is_active: bool


class BankAccountListOut(BaseModel):
    accounts: list[BankAccountOut]


class AdminMobileIn(BaseModel):
    admin_mobile_number: str = Field(max_length=20)


class AdminMobileOut(BaseModel):
    admin_mobile_number: str | None = None
