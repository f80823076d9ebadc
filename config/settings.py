from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Helius (Solana RPC + WebSocket). Empty key = cache-only mode, stream never starts.
    helius_api_key: str = ""
    helius_rpc_url: str = ""
    helius_ws_url: str = ""

    # Graduation stream
    graduation_program_id: str = "pAMMBay6oceH9fJKBRHGP5D4bD4sWpmSwMn52FMfXEA"  # PumpSwap AMM
    graduation_grace_period_sec: float = 30.0  # suppress backlog burst after (re)subscribe
    graduation_keepalive_sec: float = 30.0
    graduation_reconnect_base_delay_sec: float = 5.0
    graduation_max_reconnect_attempts: int = 10  # then degraded, cache-only
    graduation_inflight_capacity: int = 100
    graduation_cache_capacity: int = 100

    # getTransaction follow-up calls
    tx_fetch_min_interval_sec: float = 0.5
    tx_fetch_retry_delay_sec: float = 10.0
    tx_fetch_attempts: int = 2

    # Metadata sources
    dexscreener_max_rps: float = 4.0
    pumpfun_max_rps: float = 2.0
    metadata_source_timeout_sec: float = 15.0  # per source; a stalled one falls through to the next

    # Rugcheck risk summary on new graduations (free, no key)
    enable_rugcheck: bool = True
    rugcheck_max_rps: float = 2.0

    # Dashboard API
    dashboard_enabled: bool = True
    dashboard_host: str = "0.0.0.0"
    dashboard_port: int = 8080
    dashboard_cors_origins: list[str] = ["*"]  # polling frontends live on other origins
    dashboard_debug: bool = False  # exposes /api/docs
    token_price_rate_limit: str = "60/minute"
    token_prices_rate_limit: str = "30/minute"  # bulk lookup, up to 20 contracts each
    token_prices_max_contracts: int = 20

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
    json_logs: bool = False

    @property
    def rpc_url(self) -> str:
        if self.helius_rpc_url:
            return self.helius_rpc_url
        if self.helius_api_key:
            return f"https://mainnet.helius-rpc.com/?api-key={self.helius_api_key}"
        return ""

    @property
    def ws_url(self) -> str:
        if self.helius_ws_url:
            return self.helius_ws_url
        if self.helius_api_key:
            return f"wss://mainnet.helius-rpc.com/?api-key={self.helius_api_key}"
        return ""


settings = Settings()
