"""EVM chains the service knows how to name. Support itself depends on
which RPC URLs are configured (see ``Settings.rpc_urls``)."""

KNOWN_CHAINS: dict[int, str] = {
    1: "Ethereum",
    56: "BSC",
    137: "Polygon",
    42161: "Arbitrum",
    10: "Optimism",
    8453: "Base",
    43114: "Avalanche",
}


def chain_name(chain_id: int) -> str:
    return KNOWN_CHAINS.get(chain_id, f"chain-{chain_id}")
