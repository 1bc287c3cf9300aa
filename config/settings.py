from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Helius (Solana RPC + WebSocket)
    helius_api_key: str = ""
    solana_rpc_url: str = ""  # falls back to Helius when empty
    solana_ws_url: str = ""

    # Raydium launch detection
    raydium_fee_account: str = "7YttLkHDoNj9wyDur5pM1ejNaAvT9X4eqaYcHQqtj2G5"
    raydium_amm_authority: str = "5Q544fKrFoe6tsEbD7S8EmxGTJYAKtTVhAW5Q5pge4j1"
    quote_mint: str = "So11111111111111111111111111111111111111112"  # WSOL

    # Rugcheck
    rugcheck_base_url: str = "https://api.rugcheck.xyz/v1"
    rugcheck_max_rps: float = 2.0
    high_risk_score: int = 10000  # summary score at/above this = high risk

    # Holder analysis
    top_holders_n: int = 10
    bundled_threshold_pct: float = 1.0

    # Developer checks
    dev_sold_signature_limit: int = 50

    # Worker pool / upstream limits
    analysis_workers: int = 5
    queue_maxsize: int = 1000
    max_concurrent_requests: int = 8
    rpc_max_rps: float = 10.0
    branch_timeout_sec: float = 45.0
    tx_fetch_initial_delay_sec: float = 2.0
    tx_fetch_retries: int = 4

    # Persistence
    output_path: str = "data/new_solana_tokens.jsonl"
    database_url: str = ""  # e.g. postgresql+asyncpg://...; empty = file sink only

    # Observability
    stats_interval_sec: int = 300
    log_level: str = "INFO"
    log_dir: str = "logs"
    json_logs: bool = False

    @property
    def rpc_url(self) -> str:
        if self.solana_rpc_url:
            return self.solana_rpc_url
        return f"https://mainnet.helius-rpc.com/?api-key={self.helius_api_key}"

    @property
    def ws_url(self) -> str:
        if self.solana_ws_url:
            return self.solana_ws_url
        return f"wss://mainnet.helius-rpc.com/?api-key={self.helius_api_key}"


settings = Settings()
