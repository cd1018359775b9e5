from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # honeypot.is (reputation source, free, no key)
    honeypot_api_url: str = "https://api.honeypot.is/v2/IsHoneypot"
    honeypot_timeout_sec: float = 10.0
    honeypot_max_retries: int = 2  # extra attempts after the first
    honeypot_retry_delay_sec: float = 1.0  # doubled on every retry

    # EVM RPC (chain source)
    rpc_timeout_sec: float = 15.0  # eth_getCode per attempt
    rpc_call_timeout_sec: float = 5.0  # each ERC20 probe
    rpc_max_retries: int = 2
    rpc_retry_delay_sec: float = 1.0

    # RPC endpoints; a chain is supported only when its URL is set
    ethereum_rpc_url: str = ""
    bsc_rpc_url: str = ""
    polygon_rpc_url: str = ""
    arbitrum_rpc_url: str = ""
    optimism_rpc_url: str = ""
    base_rpc_url: str = ""
    avalanche_rpc_url: str = ""

    # Aggregation weights (normalized if they don't sum to 1)
    reputation_weight: float = 0.6
    chain_weight: float = 0.4

    # HTTP API
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    api_debug: bool = False
    check_rate_limit: str = "30/minute"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False
    log_dir: str = "logs"  # empty = console only

    def rpc_urls(self) -> dict[int, str]:
        """Chain id -> RPC URL for every configured endpoint."""
        by_chain = {
            1: self.ethereum_rpc_url,
            56: self.bsc_rpc_url,
            137: self.polygon_rpc_url,
            42161: self.arbitrum_rpc_url,
            10: self.optimism_rpc_url,
            8453: self.base_rpc_url,
            43114: self.avalanche_rpc_url,
        }
        return {
            chain_id: url.strip()
            for chain_id, url in by_chain.items()
            if url and url.strip() not in ("", "http://", "https://")
        }


settings = Settings()
