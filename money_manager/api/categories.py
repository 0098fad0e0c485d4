from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import update
from sqlmodel import Session, select

from money_manager.core.errors import InvalidOperation
from money_manager.core.security import get_current_user, get_optional_user
from money_manager.database import atomic, get_session
from money_manager.models.category import Category
from money_manager.models.enums import CategoryKind
from money_manager.models.transaction import Transaction
from money_manager.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate, GroupedCategories
from money_manager.services.notifier import CATEGORIES_UPDATED, Notifier, notify
from money_manager.services.realtime import get_notifier
from money_manager.utils.account_helpers import get_owned_category

router = APIRouter(prefix="/categories", tags=["categories"])


def _categories_of_kind(session: Session, user_id: UUID, kind: CategoryKind):
    return session.exec(
        select(Category)
        .where(Category.user_id == user_id, Category.kind == kind)
        .order_by(Category.name)
    ).all()


def _ensure_unique_name(session: Session, user_id: UUID, name: str, exclude_id: Optional[int] = None):
    query = select(Category).where(Category.user_id == user_id, Category.name == name)
    if exclude_id is not None:
        query = query.where(Category.id != exclude_id)
    if session.exec(query).first():
        raise InvalidOperation("Category already exists")


@router.get("")
@router.get("/")
def list_categories(
    type: Optional[CategoryKind] = Query(None),
    user_id: Optional[UUID] = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    """
    Sin filtro devuelve ``{expense, income}``; las de tipo bill van con expense.
    Con ``?type=`` devuelve solo ese tipo.
    """
    if type is not None:
        if user_id is None:
            return []
        return [CategoryRead.model_validate(c) for c in _categories_of_kind(session, user_id, type)]

    if user_id is None:
        return GroupedCategories()

    expense = _categories_of_kind(session, user_id, CategoryKind.expense)
    bill = _categories_of_kind(session, user_id, CategoryKind.bill)
    income = _categories_of_kind(session, user_id, CategoryKind.income)
    return GroupedCategories(
        expense=[CategoryRead.model_validate(c) for c in [*expense, *bill]],
        income=[CategoryRead.model_validate(c) for c in income],
    )


@router.get("/type/{kind}", response_model=List[CategoryRead])
def list_categories_by_type(
    kind: CategoryKind,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return _categories_of_kind(session, user_id, kind)


@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(
    data: CategoryCreate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    name = data.name.strip()
    _ensure_unique_name(session, user_id, name)

    with atomic(session):
        category = Category(user_id=user_id, name=name, icon=data.icon or "tag", kind=data.kind)
        session.add(category)

    session.refresh(category)
    notify(notifier, user_id, [CATEGORIES_UPDATED], {"category_id": category.id})
    return category


@router.put("/{category_id}", response_model=CategoryRead)
def update_category(
    category_id: int,
    data: CategoryUpdate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    changes = data.model_dump(exclude_unset=True)
    with atomic(session):
        category = get_owned_category(session, user_id, category_id)
        if changes.get("name"):
            name = changes["name"].strip()
            _ensure_unique_name(session, user_id, name, exclude_id=category.id)
            category.name = name
        if changes.get("icon"):
            category.icon = changes["icon"]
        session.add(category)

    session.refresh(category)
    notify(notifier, user_id, [CATEGORIES_UPDATED], {"category_id": category.id})
    return category


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    """Los movimientos históricos se conservan con ``category_id`` en null."""
    with atomic(session):
        category = get_owned_category(session, user_id, category_id)
        session.execute(
            update(Transaction)
            .where(Transaction.user_id == user_id, Transaction.category_id == category_id)
            .values(category_id=None)
        )
        session.delete(category)

    notify(notifier, user_id, [CATEGORIES_UPDATED], {"category_id": category_id})
    return {"success": True}
