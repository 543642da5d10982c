import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal

from web3 import AsyncWeb3
from web3.middleware import ExtraDataToPOAMiddleware

from rates_oracle.schemas.schemas import TransactionResult

logger = logging.getLogger(__name__)

CURRENCIES_ABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "user", "type": "address"},
            {
                "components": [
                    {"internalType": "uint256", "name": "rate", "type": "uint256"},
                    {"internalType": "uint8", "name": "precision", "type": "uint8"},
                    {"internalType": "string", "name": "pair", "type": "string"}
                ],
                "internalType": "struct Currencies.Rate[]",
                "name": "data",
                "type": "tuple[]"
            },
            {"internalType": "string", "name": "type", "type": "string"},
            {"internalType": "uint64", "name": "memo", "type": "uint64"}
        ],
        "name": "updaterates",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    }
]


class LedgerError(Exception):
    pass


class AuthorizationMismatchError(LedgerError):
    pass


class StaleReferenceBlockError(LedgerError):
    pass


class TransactionRevertedError(LedgerError):
    def __init__(self, tx_hash):
        super().__init__(f"Transaction reverted on-chain: {tx_hash}")
        self.tx_hash = tx_hash


class LedgerClient(ABC):
    """Signs and broadcasts a single contract action"""

    @property
    @abstractmethod
    def address(self):
        """Address of the signing account"""

    @abstractmethod
    async def is_connected(self):
        ...

    @abstractmethod
    async def submit(self, action, authorization, options):
        ...


def scale_rate(rate, precision):
    """Fixed-point integer for ``rate`` with ``precision`` decimals"""
    scaled = Decimal(str(rate)).scaleb(precision)
    return int(scaled.to_integral_value(rounding=ROUND_HALF_UP))


class Web3LedgerClient(LedgerClient):
    def __init__(self, w3, account, contract_abi=None, gas=300000, clock=time.time):
        self.w3 = w3
        self.account = account
        self.contract_abi = contract_abi or CURRENCIES_ABI
        self.gas = gas
        self.clock = clock
        # Held from nonce read until the raw transaction is sent
        self._nonce_lock = asyncio.Lock()

    @property
    def address(self):
        return self.account.address

    async def is_connected(self):
        return await self.w3.is_connected()

    def _encode_args(self, payload):
        return {
            'user': AsyncWeb3.to_checksum_address(payload.user),
            'data': [
                (scale_rate(record.rate, record.precision), record.precision, record.pair)
                for record in payload.data
            ],
            'type': str(payload.type),
            'memo': payload.memo,
        }

    async def _check_reference_block(self, options):
        """Refuse to sign against a node whose reference block is already expired"""
        latest = await self.w3.eth.block_number
        ref_block = await self.w3.eth.get_block(max(latest - options.blocks_behind, 0))
        age = self.clock() - ref_block['timestamp']
        if age > options.expire_seconds:
            raise StaleReferenceBlockError(
                f"Reference block {ref_block['number']} is {age:.0f}s old "
                f"(expire window {options.expire_seconds}s)"
            )

    async def submit(self, action, authorization, options):
        if authorization.actor.lower() != self.account.address.lower():
            raise AuthorizationMismatchError(
                f"Actor {authorization.actor} does not match signing account {self.account.address}"
            )
        logger.info(
            "Submitting %s to %s as %s@%s",
            action.name, action.account, authorization.actor, authorization.permission,
        )

        await self._check_reference_block(options)

        contract = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(action.account),
            abi=self.contract_abi
        )
        function_call = contract.functions[action.name](**self._encode_args(action.data))

        async with self._nonce_lock:
            txn = await function_call.build_transaction({
                'from': self.account.address,
                'nonce': await self.w3.eth.get_transaction_count(self.account.address, 'pending'),
                'gas': self.gas,
                'gasPrice': await self.w3.eth.gas_price
            })

            signed = self.w3.eth.account.sign_transaction(txn, self.account.key)
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)

        tx_hash_hex = AsyncWeb3.to_hex(tx_hash)

        logger.info("Transaction sent: %s", tx_hash_hex)
        logger.info("Waiting for confirmation...")

        receipt = await self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=options.expire_seconds
        )

        if receipt['status'] != 1:
            raise TransactionRevertedError(tx_hash_hex)

        logger.info("Rates submitted, gas used: %s", receipt['gasUsed'])

        return TransactionResult(
            tx_hash=tx_hash_hex,
            block_number=receipt['blockNumber'],
            gas_used=receipt['gasUsed'],
            status=receipt['status'],
        )


def load_abi(abi_path):
    """Load contract ABI from a JSON file with an 'abi' key"""
    with open(abi_path) as f:
        contract_json = json.load(f)
    return contract_json['abi']


def create_ledger_client(config):
    w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(config.RPC_URL))

    # Flare and other POA chains carry extra data in the block header
    w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

    account = w3.eth.account.from_key(config.PRIVATE_KEY)

    # The authorizing actor has to be the key that signs
    if account.address.lower() != config.CURRENCIES_ACCOUNT.lower():
        raise ValueError(
            f"CURRENCIES_ACCOUNT {config.CURRENCIES_ACCOUNT} does not match "
            f"PRIVATE_KEY address {account.address}"
        )

    abi = load_abi(config.CURRENCIES_ABI_PATH) if config.CURRENCIES_ABI_PATH else CURRENCIES_ABI

    logger.info("Agent account: %s", account.address)
    logger.info("Currencies contract: %s", config.CURRENCIES_CONTRACT)

    return Web3LedgerClient(
        w3,
        account,
        contract_abi=abi,
        clock=time.time,
    )
