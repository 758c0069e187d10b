"""Logical storage keys, one value each. PersistenceLayer prepends the prefix."""

PRICE = "price"
PRICE_HISTORY = "price_history"
BETS = "bets"                  # address -> list[bet]
ROUND_PRICES = "round_prices"  # str(round_id) -> {start_price, end_price}
ROUND_POOLS = "round_pools"    # str(round_id) -> {up, down}, simulated base split
BALANCES = "balances"          # address -> balance
SESSION = "session"            # {connected, address, demo_mode}

ALL_KEYS = (PRICE, PRICE_HISTORY, BETS, ROUND_PRICES, ROUND_POOLS, BALANCES, SESSION)
