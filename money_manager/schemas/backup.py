from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field

from money_manager.models.enums import AccountKind, CategoryKind, TransactionKind
from money_manager.schemas.common import Amount, Money


# Filas tal como salen de GET /users/export; los ids son los del archivo
class AccountBackup(BaseModel):
    id: int
    name: str = Field(min_length=1, max_length=100)
    kind: AccountKind = Field(validation_alias=AliasChoices("kind", "type"))
    balance: Money = Field(default=Decimal("0.00"), ge=0)
    credit_limit: Optional[Money] = Field(default=None, ge=0)
    is_active: bool = True
    created_at: Optional[datetime] = None


class CategoryBackup(BaseModel):
    id: int
    name: str = Field(min_length=1, max_length=60)
    icon: str = "tag"
    kind: CategoryKind = Field(default=CategoryKind.expense, validation_alias=AliasChoices("kind", "type"))
    created_at: Optional[datetime] = None


class TransactionBackup(BaseModel):
    id: Optional[int] = None
    account_id: Optional[int] = None
    category_id: Optional[int] = None
    kind: TransactionKind = Field(validation_alias=AliasChoices("kind", "type"))
    # con signo en las patas de transferencia
    amount: Money
    note: Optional[str] = None
    reference_id: Optional[int] = None
    created_at: Optional[datetime] = None


class TransferBackup(BaseModel):
    id: int
    from_account_id: Optional[int] = None
    to_account_id: Optional[int] = None
    amount: Amount
    created_at: Optional[datetime] = None


class InvestmentBackup(BaseModel):
    id: int
    account_id: Optional[int] = None
    investment_type: str
    amount: Amount
    note: Optional[str] = None
    created_at: Optional[datetime] = None


class BackupSections(BaseModel):
    accounts: List[AccountBackup] = []
    categories: List[CategoryBackup] = []
    transactions: List[TransactionBackup] = []
    transfers: List[TransferBackup] = []
    investments: List[InvestmentBackup] = []

    def is_empty(self) -> bool:
        return not any((self.accounts, self.categories, self.transactions, self.transfers, self.investments))


class DataImport(BackupSections):
    """Accepts the export document (sections under ``data``) or bare sections."""

    data: Optional[BackupSections] = None

    def sections(self) -> BackupSections:
        return self.data if self.data is not None else self
