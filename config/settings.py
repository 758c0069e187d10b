from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Rounds
    ROUND_DURATION: int = 20        # ticks per round
    TICK_DURATION_MS: int = 1000    # wall-clock ms per tick
    CLOCK_EPOCH_MS: int = 1_704_067_200_000  # 2024-01-01T00:00:00Z, tick 0

    # Wagers
    HOUSE_FEE: float = 0.02
    MIN_BET: float = 1
    MAX_BET: float = 10_000
    INITIAL_BALANCE: float = 10_000
    DEMO_ADDRESS: str = "DEMOWALLETAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"

    # Price walk
    PRICE_INITIAL: float = 2500.0
    PRICE_MIN: float = 1000.0
    PRICE_MAX: float = 5000.0
    PRICE_FORCE: float = 1.0
    PRICE_MAX_VELOCITY: float = 5.0
    PRICE_HISTORY_SIZE: int = 50

    # Settlement of rounds that were never observed while active
    SETTLEMENT_FALLBACK_ENABLED: bool = True
    FALLBACK_WIN_PROBABILITY: float = 0.5
    RANDOM_SEED: int | None = None

    # Backend selection; simulation needs no network at all
    SIMULATION_MODE: bool = True
    LEDGER_RPC_URL: str = "https://rpc.qubic.org"
    LEDGER_CONTRACT_ID: int = 1
    LEDGER_TIMEOUT_SECONDS: float = 5.0

    # Storage: memory | file | redis
    STORAGE_BACKEND: str = "memory"
    STORAGE_PATH: str = "tick_rounds_state.json"
    REDIS_URL: str = "redis://localhost:6379/0"
    STORAGE_KEY_PREFIX: str = "tr:"

    # Polling hints
    TICKER_ENABLED: bool = True
    PRICE_REFRESH_SECONDS: float = 2.0
    ROUNDS_HISTORY_LIMIT: int = 20

    # App
    APP_NAME: str = "Tick Rounds"
    DEBUG: bool = False


settings = Settings()
