from money_manager.models.enums import CategoryKind

# Categorías creadas para cada usuario nuevo
DEFAULT_CATEGORIES = (
    {"name": "General Expense", "kind": CategoryKind.expense, "icon": "receipt"},
    {"name": "General Income", "kind": CategoryKind.income, "icon": "money-bill-wave"},
    {"name": "General Bill", "kind": CategoryKind.bill, "icon": "file-invoice-dollar"},
)
