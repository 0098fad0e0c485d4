from sqlmodel import SQLModel

from money_manager.database import create_db_and_tables, engine
from money_manager.models import account, category, investment, notification, share_link, transaction, transfer, user  # noqa: F401

# Borra y recrea todas las tablas del modelo (se pierden todos los datos)
SQLModel.metadata.drop_all(engine)
create_db_and_tables()

print("Base de datos reseteada correctamente (tablas recreadas).")
