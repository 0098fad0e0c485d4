from uuid import UUID

from sqlmodel import Session, select

from money_manager.constants.categories import DEFAULT_CATEGORIES
from money_manager.models.category import Category


def create_base_categories(user_id: UUID, session: Session) -> None:
    """Crea las categorías por defecto que falten; el commit queda al llamador."""
    existing = set(
        session.exec(select(Category.name).where(Category.user_id == user_id)).all()
    )
    for data in DEFAULT_CATEGORIES:
        if data["name"] in existing:
            continue
        session.add(Category(user_id=user_id, **data))
