class TokenSafetyError(Exception):
    """Request rejected before any data source was queried."""


class InvalidRequestError(TokenSafetyError):
    pass


class UnsupportedChainError(TokenSafetyError):
    def __init__(self, chain_id: int, supported: list[int] | None = None) -> None:
        self.chain_id = chain_id
        self.supported = sorted(supported or [])
        super().__init__(
            f"Chain {chain_id} not supported. "
            f"Supported chains: {', '.join(str(c) for c in self.supported) or 'none'}"
        )
