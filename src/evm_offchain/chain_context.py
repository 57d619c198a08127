"""
EVM Chain Context Management

Pure chain context functionality without API dependencies.
Handles RPC provider setup, the server-side signing account and explorer links.
"""

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3


class EvmChainContext:
    """Manages the JSON-RPC connection and signing account for one EVM network"""

    def __init__(
        self,
        rpc_url: str,
        private_key: str | None = None,
        chain_id: int | None = None,
        explorer_url: str | None = None,
        request_timeout: int = 30,
    ):
        """
        Initialize chain context

        Args:
            rpc_url: JSON-RPC endpoint of the node
            private_key: Hex private key of the account that signs transactions
            chain_id: Chain ID (queried from the node when not provided)
            explorer_url: Base URL of a block explorer (e.g. https://sepolia.etherscan.io)
            request_timeout: HTTP timeout for RPC requests in seconds
        """
        if not rpc_url:
            raise ValueError("RPC URL required for chain context")

        self.rpc_url = rpc_url
        self.explorer_url = explorer_url.rstrip("/") if explorer_url else None
        self._chain_id = chain_id

        self.web3 = AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout})
        )

        self.account: LocalAccount | None = None
        if private_key:
            self.account = Account.from_key(private_key)

    def get_web3(self) -> AsyncWeb3:
        """Get the AsyncWeb3 instance"""
        return self.web3

    def get_account(self) -> LocalAccount:
        """Get the signing account"""
        if self.account is None:
            raise ValueError("Signing account not initialized (missing private key)")
        return self.account

    @property
    def signer_address(self) -> str:
        return self.get_account().address

    async def get_chain_id(self) -> int:
        """
        Get the chain ID, querying the node once if it was not configured

        Returns:
            Chain ID used for EIP-155 replay protection
        """
        if self._chain_id is None:
            self._chain_id = await self.web3.eth.chain_id
        return self._chain_id

    async def is_connected(self) -> bool:
        """Check RPC connectivity"""
        return await self.web3.is_connected()

    def to_checksum_address(self, address: str) -> str:
        """Normalize an address to its EIP-55 checksum form"""
        return AsyncWeb3.to_checksum_address(address)

    def get_network_info(self) -> dict:
        """
        Get network configuration information

        Returns:
            Dictionary containing network information
        """
        return {
            "rpc_url": self.rpc_url,
            "chain_id": self._chain_id,
            "signer": self.account.address if self.account else None,
            "explorer_url": self.explorer_url,
        }

    def get_explorer_url(self, tx_hash: str) -> str | None:
        """
        Get explorer URL for transaction

        Args:
            tx_hash: Transaction hash (0x-prefixed hex)

        Returns:
            Explorer URL for the transaction, or None when no explorer is configured
        """
        if not self.explorer_url:
            return None
        return f"{self.explorer_url}/tx/{tx_hash}"
