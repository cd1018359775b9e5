"""On-chain token analysis: reads the contract directly over EVM RPC.

Checks that the address holds code, probes the ERC20 read interface and
derives a technical risk score. One ``AsyncWeb3`` connection per chain is
created at startup and reused for every request.
"""

import asyncio
from typing import Any

from loguru import logger
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from src.parsers.coerce import to_int, to_str
from src.parsers.exceptions import UnsupportedChainError
from src.parsers.records import ChainRecord, ContractChecks

ERC20_ABI: list[dict[str, Any]] = [
    {"name": "name", "inputs": [], "outputs": [{"name": "", "type": "string"}],
     "stateMutability": "view", "type": "function"},
    {"name": "symbol", "inputs": [], "outputs": [{"name": "", "type": "string"}],
     "stateMutability": "view", "type": "function"},
    {"name": "decimals", "inputs": [], "outputs": [{"name": "", "type": "uint8"}],
     "stateMutability": "view", "type": "function"},
    {"name": "totalSupply", "inputs": [], "outputs": [{"name": "", "type": "uint256"}],
     "stateMutability": "view", "type": "function"},
    {"name": "balanceOf", "inputs": [{"name": "_owner", "type": "address"}],
     "outputs": [{"name": "balance", "type": "uint256"}],
     "stateMutability": "view", "type": "function"},
]

MIN_CODE_SIZE = 100  # bytes; below this it can't be a real ERC20
MAX_CODE_SIZE = 50_000  # bytes; above this suggests obfuscation
MAX_DECIMALS = 18

EOA_RISK_SCORE = 100

# PUSH4 <selector>: how solc embeds function selectors in the dispatcher
_PUSH4 = b"\x63"
PAUSE_SELECTOR = bytes(Web3.keccak(text="pause()")[:4])
MINT_SELECTOR = bytes(Web3.keccak(text="mint(address,uint256)")[:4])

_PROBES = ("name", "symbol", "decimals", "total_supply", "balance_of")


class OnChainAnalyzer:
    """Reads token contracts through a fixed chain id -> connection map."""

    def __init__(
        self,
        connections: dict[int, AsyncWeb3],
        *,
        timeout: float = 15.0,
        call_timeout: float = 5.0,
        max_retries: int = 2,
        retry_delay: float = 1.0,
    ) -> None:
        self._connections = dict(connections)
        self._timeout = timeout
        self._call_timeout = call_timeout
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        logger.info(f"[ONCHAIN] Initialized with {len(self._connections)} chain(s)")

    @classmethod
    def from_rpc_urls(cls, rpc_urls: dict[int, str], **kwargs: Any) -> "OnChainAnalyzer":
        connections = {
            chain_id: AsyncWeb3(AsyncHTTPProvider(url))
            for chain_id, url in rpc_urls.items()
        }
        return cls(connections, **kwargs)

    @property
    def supported_chains(self) -> list[int]:
        return sorted(self._connections)

    def is_chain_supported(self, chain_id: int) -> bool:
        return chain_id in self._connections

    async def close(self) -> None:
        for chain_id, w3 in self._connections.items():
            try:
                await w3.provider.disconnect()
            except Exception as e:
                logger.debug(f"[ONCHAIN] Disconnect failed for chain {chain_id}: {e}")

    async def analyze_token(self, token_address: str, chain_id: int) -> ChainRecord:
        """Analyze a token contract.

        Raises ``UnsupportedChainError`` for a chain without a registered
        connection. Every other failure is returned as an errored record.
        """
        w3 = self._connections.get(chain_id)
        if w3 is None:
            raise UnsupportedChainError(chain_id, self.supported_chains)

        if not Web3.is_address(token_address):
            return ChainRecord.failed("Invalid Ethereum address format")

        try:
            address = Web3.to_checksum_address(token_address)
            code = bytes(await self._get_code(w3, address))

            if not code:
                # OK record, not errored: the maximal risk must count in the weighted score
                logger.info(f"[ONCHAIN] {address[:12]} on chain {chain_id} is not a contract (EOA)")
                return ChainRecord(
                    is_contract=False,
                    has_code=False,
                    code_size=0,
                    is_erc20=False,
                    risk_score=EOA_RISK_SCORE,
                )

            contract = w3.eth.contract(address=address, abi=ERC20_ABI)
            probes = await self._probe_erc20(contract, address)
            record = build_contract_record(code, probes)
            logger.debug(
                f"[ONCHAIN] {address[:12]} chain={chain_id} erc20={record.is_erc20} "
                f"{record.symbol} size={record.code_size} risk={record.risk_score}"
            )
            return record

        except Exception as e:
            logger.warning(f"[ONCHAIN] Analysis error for {token_address[:12]} on chain {chain_id}: {e}")
            return ChainRecord.failed(f"Analysis failed: {e}")

    async def _get_code(self, w3: AsyncWeb3, address: str) -> bytes:
        """eth_getCode with per-attempt timeout and exponential backoff."""
        last_error: Exception | None = None
        for attempt in range(self._max_retries + 1):
            try:
                return await asyncio.wait_for(w3.eth.get_code(address), timeout=self._timeout)
            except Exception as e:
                last_error = e
                if attempt < self._max_retries:
                    delay = self._retry_delay * 2**attempt
                    logger.debug(f"[ONCHAIN] getCode {type(e).__name__}, retry in {delay}s")
                    await asyncio.sleep(delay)
        raise last_error or RuntimeError("getCode failed")

    async def _probe_erc20(self, contract: Any, address: str) -> dict[str, Any]:
        """Call the ERC20 read functions concurrently.

        Each call is time-boxed on its own; a failing call yields its
        exception in the result map and never cancels the others.
        """
        calls = [
            contract.functions.name().call(),
            contract.functions.symbol().call(),
            contract.functions.decimals().call(),
            contract.functions.totalSupply().call(),
            contract.functions.balanceOf(address).call(),
        ]
        results = await asyncio.gather(
            *(asyncio.wait_for(c, timeout=self._call_timeout) for c in calls),
            return_exceptions=True,
        )
        probes = dict(zip(_PROBES, results))
        for label, result in probes.items():
            if isinstance(result, BaseException):
                logger.debug(f"[ONCHAIN] {label}() failed for {address[:12]}: {type(result).__name__}")
        return probes


def _value(probes: dict[str, Any], key: str) -> Any:
    result = probes.get(key)
    return None if isinstance(result, BaseException) else result


def build_contract_record(code: bytes, probes: dict[str, Any]) -> ChainRecord:
    """Turn byte code plus ERC20 probe results into a ChainRecord."""
    code_size = len(code)
    name = to_str(_value(probes, "name"))
    symbol = to_str(_value(probes, "symbol"))
    decimals = to_int(_value(probes, "decimals"))
    raw_supply = _value(probes, "total_supply")
    total_supply = raw_supply if isinstance(raw_supply, int) and not isinstance(raw_supply, bool) else None

    checks = ContractChecks(
        has_name=bool(name),
        has_symbol=bool(symbol),
        valid_decimals=decimals is not None and 0 <= decimals <= MAX_DECIMALS,
        has_supply=total_supply is not None and total_supply > 0,
        has_balance_of="balance_of" in probes and not isinstance(probes["balance_of"], BaseException),
        reasonable_code_size=MIN_CODE_SIZE <= code_size <= MAX_CODE_SIZE,
    )
    is_erc20 = checks.has_name and checks.has_symbol and checks.valid_decimals and checks.has_supply

    return ChainRecord(
        is_contract=True,
        has_code=True,
        code_size=code_size,
        is_erc20=is_erc20,
        name=name,
        symbol=symbol,
        decimals=decimals,
        total_supply=total_supply,
        checks=checks,
        risk_score=compute_chain_risk(is_erc20, checks, code_size),
        is_pausable=_PUSH4 + PAUSE_SELECTOR in code,
        is_mintable=_PUSH4 + MINT_SELECTOR in code,
    )


def compute_chain_risk(is_erc20: bool, checks: ContractChecks, code_size: int) -> int:
    """Technical risk 0-100 from fixed penalties."""
    score = 0
    if not is_erc20:
        score += 40

    if not checks.has_name:
        score += 10
    if not checks.has_symbol:
        score += 10
    if not checks.valid_decimals:
        score += 15
    if not checks.has_supply:
        score += 15
    if not checks.has_balance_of:
        score += 5

    if code_size < MIN_CODE_SIZE:
        score += 20
    elif code_size > MAX_CODE_SIZE:
        score += 10

    return max(0, min(100, score))
