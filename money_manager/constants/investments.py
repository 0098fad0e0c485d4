INVESTMENT_TYPES = (
    {"id": "stocks", "name": "Stocks", "icon": "chart-line"},
    {"id": "mutual_funds", "name": "Mutual Funds", "icon": "chart-pie"},
    {"id": "gold", "name": "Gold", "icon": "coins"},
    {"id": "crypto", "name": "Crypto", "icon": "bitcoin-sign"},
    {"id": "fd", "name": "Fixed Deposit", "icon": "building-columns"},
)

INVESTMENT_TYPE_IDS = frozenset(t["id"] for t in INVESTMENT_TYPES)
