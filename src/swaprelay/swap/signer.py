"""Server-side EVM transaction signer.

Holds the configured hot wallet account and a Web3 connection. Signing is
delegated to eth-account; this module only fills transaction params,
broadcasts, and waits for receipts. JSON-RPC calls are blocking and run in
the default executor so one slow node call never stalls other requests.
"""

import asyncio
import logging
from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.exceptions import TransactionNotFound

logger = logging.getLogger(__name__)


class ConfirmationTimeout(TimeoutError):
    """Transaction was not mined within the allowed wait."""

    def __init__(self, tx_hash: str, timeout: float):
        self.tx_hash = tx_hash
        self.timeout = timeout
        super().__init__(f"Transaction {tx_hash} not confirmed after {timeout}s")


class EVMSigner:
    """Signer for EVM-compatible chains."""

    def __init__(
        self,
        web3: Web3,
        account: LocalAccount,
        confirmation_timeout: float = 180.0,
        poll_interval: float = 2.0,
    ):
        self.web3 = web3
        self.account = account
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval

    @classmethod
    def from_private_key(cls, web3: Web3, private_key: str, **kwargs) -> "EVMSigner":
        """Create a signer from a hex private key (with or without 0x)."""
        return cls(web3, Account.from_key(private_key), **kwargs)

    @property
    def address(self) -> str:
        return self.account.address

    def matches(self, address: str) -> bool:
        """Case-insensitive address comparison."""
        return self.address.lower() == address.lower()

    async def run_blocking(self, fn, *args):
        """Run a blocking JSON-RPC call in the default thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: fn(*args))

    async def sign_and_send_transaction(self, tx_params: dict) -> str:
        """Sign and broadcast a transaction.

        Missing ``from``, ``nonce``, ``chainId``, ``gas`` and ``gasPrice``
        are filled from the connected node; ``gas`` is estimated only when
        the caller did not supply one.

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        tx = dict(tx_params)
        tx.setdefault("from", self.address)

        if "nonce" not in tx:
            tx["nonce"] = await self.run_blocking(
                self.web3.eth.get_transaction_count, self.address, "pending"
            )

        if "chainId" not in tx:
            tx["chainId"] = await self.run_blocking(lambda: self.web3.eth.chain_id)

        if "gas" not in tx:
            tx["gas"] = await self.run_blocking(self.web3.eth.estimate_gas, tx)

        if "gasPrice" not in tx and "maxFeePerGas" not in tx:
            tx["gasPrice"] = await self.run_blocking(lambda: self.web3.eth.gas_price)

        signed = self.account.sign_transaction(tx)
        tx_hash = await self.run_blocking(self.web3.eth.send_raw_transaction, signed.raw_transaction)
        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.info(f"Broadcast tx {tx_hash_hex} (nonce={tx['nonce']}, gas={tx['gas']})")
        return tx_hash_hex

    async def wait_for_confirmation(
        self,
        tx_hash: str,
        timeout: Optional[float] = None,
    ) -> dict:
        """Poll until the transaction has a receipt.

        Reverted transactions are returned, not raised; callers decide
        what a ``status`` of 0 means for them.

        Raises:
            ConfirmationTimeout: no receipt within ``timeout`` seconds
        """
        timeout = self.confirmation_timeout if timeout is None else timeout
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        while True:
            try:
                receipt = await self.run_blocking(self.web3.eth.get_transaction_receipt, tx_hash)
            except TransactionNotFound:
                receipt = None

            if receipt is not None:
                logger.info(
                    f"Tx {tx_hash} mined in block {receipt['blockNumber']} "
                    f"(status={receipt['status']})"
                )
                return dict(receipt)

            if loop.time() >= deadline:
                raise ConfirmationTimeout(tx_hash, timeout)

            await asyncio.sleep(self.poll_interval)
