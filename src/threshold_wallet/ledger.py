"""Target invocation capability.

The engine never moves value itself. After a request is authorized it asks
an injected TargetInvoker to perform ``invoke(sender, target, value, data)``
and only looks at whether that succeeded.

Two implementations ship here:
- SimulatedLedger: in-memory balances and contract handlers, for tests and demos
- Web3Invoker: sends the call as an EVM transaction from an operator account
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, Union, runtime_checkable

from eth_account import Account
from web3 import Web3

from .identity import AddressLike, normalize_address
from .logging_config import mask_hex

logger = logging.getLogger(__name__)


@dataclass
class InvocationResult:
    """Outcome of one target invocation."""
    success: bool
    return_data: bytes = b""
    error: Optional[str] = None
    tx_hash: Optional[str] = None


@runtime_checkable
class TargetInvoker(Protocol):
    """Performs the external call for an authorized action."""

    def invoke(
        self,
        sender: str,
        target: str,
        value: int,
        payload: bytes,
    ) -> InvocationResult:
        ...


ContractHandler = Callable[[str, int, bytes], Union[bytes, InvocationResult, None]]


@dataclass
class SimulatedLedger:
    """
    In-memory ledger standing in for the execution environment.

    Tracks native balances and dispatches calls to registered contract
    handlers. A call is atomic: the value transfer is reverted when the
    handler fails.

    ``calls`` records every (sender, target, value, payload) in order and is
    never trimmed; it exists for test assertions, so long-lived processes
    should not use this ledger.

    Example:
        ledger = SimulatedLedger()
        ledger.credit(wallet_address, 10 * 10**18)
        ledger.register_contract(token_address, token_handler)
    """

    balances: Dict[str, int] = field(default_factory=dict)
    _contracts: Dict[str, ContractHandler] = field(default_factory=dict)
    calls: List[Tuple[str, str, int, bytes]] = field(default_factory=list)

    def balance_of(self, account: AddressLike) -> int:
        return self.balances.get(normalize_address(account), 0)

    def credit(self, account: AddressLike, value: int) -> None:
        """Passive receipt: add value to an account, no checks beyond sign."""
        if value < 0:
            raise ValueError("credit value must be non-negative")
        address = normalize_address(account)
        self.balances[address] = self.balances.get(address, 0) + value

    def register_contract(self, address: AddressLike, handler: ContractHandler) -> None:
        """Route calls to ``address`` through ``handler(sender, value, data)``.

        The handler returns the call's return data (or None), or an
        InvocationResult; raising marks the call as failed.
        """
        self._contracts[normalize_address(address)] = handler

    def invoke(
        self,
        sender: str,
        target: str,
        value: int,
        payload: bytes,
    ) -> InvocationResult:
        sender = normalize_address(sender)
        target = normalize_address(target)
        self.calls.append((sender, target, value, bytes(payload)))

        if self.balances.get(sender, 0) < value:
            return InvocationResult(success=False, error="insufficient balance")

        self.balances[sender] = self.balances.get(sender, 0) - value
        self.balances[target] = self.balances.get(target, 0) + value

        handler = self._contracts.get(target)
        if handler is None:
            return InvocationResult(success=True)

        try:
            outcome = handler(sender, value, bytes(payload))
        except Exception as e:
            logger.debug("Contract handler at %s raised: %s", target, e)
            result = InvocationResult(success=False, error=str(e) or type(e).__name__)
        else:
            if isinstance(outcome, InvocationResult):
                result = outcome
            else:
                result = InvocationResult(success=True, return_data=outcome or b"")

        if not result.success:
            self.balances[target] -= value
            self.balances[sender] += value
        return result


class Web3Invoker:
    """
    Sends authorized calls as EVM transactions through web3.

    The wallet's address must be the operator account's address: the
    engine authorizes, the operator key only signs what was authorized.
    """

    def __init__(
        self,
        w3: Web3,
        operator_key: str,
        gas_limit: Optional[int] = None,
        receipt_timeout: float = 120.0,
    ):
        self._w3 = w3
        self._account = Account.from_key(operator_key)
        self._gas_limit = gas_limit
        self._receipt_timeout = receipt_timeout

    @property
    def address(self) -> str:
        return self._account.address

    def invoke(
        self,
        sender: str,
        target: str,
        value: int,
        payload: bytes,
    ) -> InvocationResult:
        if normalize_address(sender) != self._account.address:
            return InvocationResult(
                success=False,
                error=f"sender {sender} is not the operator account",
            )

        try:
            tx: Dict[str, Any] = {
                "from": self._account.address,
                "to": Web3.to_checksum_address(target),
                "value": value,
                "data": bytes(payload),
                "nonce": self._w3.eth.get_transaction_count(self._account.address),
                "chainId": self._w3.eth.chain_id,
                "gasPrice": self._w3.eth.gas_price,
            }
            tx["gas"] = self._gas_limit or self._w3.eth.estimate_gas(tx)

            signed = self._account.sign_transaction(tx)
            tx_hash = self._w3.eth.send_raw_transaction(signed.raw_transaction)
            receipt = self._w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout
            )
        except Exception as e:
            logger.warning("Invocation of %s failed: %s", target, e)
            return InvocationResult(success=False, error=str(e))

        tx_hex = Web3.to_hex(tx_hash)
        logger.info("Invocation tx %s mined with status %s", mask_hex(tx_hex), receipt["status"])
        if receipt["status"] != 1:
            return InvocationResult(success=False, error="transaction reverted", tx_hash=tx_hex)
        return InvocationResult(success=True, tx_hash=tx_hex)
