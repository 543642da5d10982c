"""Shared fakes for the ledger client and the web3 object."""

import asyncio
from types import SimpleNamespace

import pytest

from rates_oracle.schemas.schemas import TransactionResult
from rates_oracle.services.ledger_client import LedgerClient

AGENT_ADDRESS = "0x" + "ab" * 20
CONTRACT_ADDRESS = "0x" + "11" * 20


class FakeLedger(LedgerClient):
    address = AGENT_ADDRESS

    def __init__(self, result=None, error=None, connected=True):
        self.calls = []
        self.result = result
        self.error = error
        self.connected = connected

    async def submit(self, action, authorization, options):
        self.calls.append((action, authorization, options))
        if self.error is not None:
            raise self.error
        return self.result

    async def is_connected(self):
        return self.connected


async def _value(value):
    return value


class FakeFunctionCall:
    def __init__(self, contract, name, kwargs):
        self.contract = contract
        self.name = name
        self.kwargs = kwargs

    async def build_transaction(self, params):
        self.contract.built.append((self.name, self.kwargs, params))
        return {'to': self.contract.address, 'data': '0xdeadbeef', **params}


class FakeFunctions:
    def __init__(self, contract):
        self.contract = contract

    def __getitem__(self, name):
        return lambda **kwargs: FakeFunctionCall(self.contract, name, kwargs)


class FakeContract:
    def __init__(self, address, abi):
        self.address = address
        self.abi = abi
        self.built = []
        self.functions = FakeFunctions(self)


class FakeSigner:
    def __init__(self):
        self.signed = []

    def sign_transaction(self, txn, key):
        self.signed.append((txn, key))
        return SimpleNamespace(raw_transaction=b'signed-raw-tx')


class FakeEth:
    def __init__(self, latest=100, block_timestamp=995, receipt_status=1):
        self.latest = latest
        self.block_timestamp = block_timestamp
        self.receipt_status = receipt_status
        self.account = FakeSigner()
        self.contracts = []
        self.requested_blocks = []
        self.sent = []
        self.nonce_requests = []
        self.receipt_timeouts = []

    @property
    def block_number(self):
        return _value(self.latest)

    @property
    def gas_price(self):
        return _value(25 * 10**9)

    async def get_block(self, number):
        self.requested_blocks.append(number)
        return {'number': number, 'timestamp': self.block_timestamp}

    async def get_transaction_count(self, address, block_identifier="latest"):
        self.nonce_requests.append(block_identifier)
        return 7 + len(self.sent)

    def contract(self, address, abi):
        contract = FakeContract(address, abi)
        self.contracts.append(contract)
        return contract

    async def send_raw_transaction(self, raw):
        await asyncio.sleep(0)
        self.sent.append(raw)
        return b'\x12' * 32

    async def wait_for_transaction_receipt(self, tx_hash, timeout):
        self.receipt_timeouts.append(timeout)
        return {
            'status': self.receipt_status,
            'blockNumber': self.latest + 1,
            'gasUsed': 54321,
            'transactionHash': tx_hash,
        }


class FakeWeb3:
    def __init__(self, **eth_kwargs):
        self.eth = FakeEth(**eth_kwargs)

    async def is_connected(self):
        return True


@pytest.fixture
def tx_result():
    return TransactionResult(
        tx_hash="0x" + "12" * 32,
        block_number=101,
        gas_used=54321,
        status=1,
    )


@pytest.fixture
def fake_ledger(tx_result):
    return FakeLedger(result=tx_result)


@pytest.fixture
def agent_account():
    return SimpleNamespace(address=AGENT_ADDRESS, key=b'\x01' * 32)
