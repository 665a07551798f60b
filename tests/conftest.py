import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from tokenforge.configuration.config import Base, configure_engine, get_session
from tokenforge.modules.deployments.entities import DeploymentEntity  # noqa: F401
from tokenforge.modules.multisend.entities import MultisendEntity  # noqa: F401
from tokenforge.modules.multisend.services.record_store import (
    InMemoryRecordStore,
    RepositoryRecordStore,
)
from tokenforge.modules.wallet.transaction_submitter import TransactionSubmitter

CHAIN_ID = 10143
SENDER = "0x1111111111111111111111111111111111111111"
ALICE = "0x2222222222222222222222222222222222222222"
BOB = "0x3333333333333333333333333333333333333333"
CAROL = "0x4444444444444444444444444444444444444444"
TOKEN = "0x5555555555555555555555555555555555555555"


class FakeWalletProvider:
    """
    Scripted wallet: ``failures`` maps a recipient address (lowercase) to the
    exception raised when a transfer to it is requested.
    """

    def __init__(self, accounts=None, chain_id=CHAIN_ID, failures=None, token_balance=10**30):
        self.accounts = [SENDER] if accounts is None else accounts
        self.chain_id = chain_id
        self.failures = {k.lower(): v for k, v in (failures or {}).items()}
        self.token_balance = token_balance
        self.sent = []
        self.calls = []
        self.events = []
        self.lookups = {"accounts": 0, "chain_id": 0}

    async def get_accounts(self):
        self.lookups["accounts"] += 1
        return list(self.accounts)

    async def get_chain_id(self):
        self.lookups["chain_id"] += 1
        return self.chain_id

    async def call(self, tx_params):
        self.calls.append(tx_params)
        return self.token_balance.to_bytes(32, "big")

    async def request_sign_and_send(self, tx_params):
        target = tx_params["to"].lower()
        if tx_params.get("data"):
            # transfer(address,uint256): la dirección ocupa los bytes 16..36 del primer argumento
            target = "0x" + tx_params["data"][2 + 8 + 24:2 + 8 + 64]
        self.events.append(("send", target))
        failure = self.failures.get(target)
        if failure is not None:
            raise failure
        self.sent.append(tx_params)
        return "0x" + f"{len(self.sent):064x}"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    configure_engine(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = get_session()
    yield session
    session.close()


@pytest.fixture
def repository_store(engine):
    return RepositoryRecordStore()


@pytest.fixture
def memory_store():
    return InMemoryRecordStore()


@pytest.fixture
def wallet():
    return FakeWalletProvider()


@pytest.fixture
def submitter(wallet):
    return TransactionSubmitter(wallet, expected_chain_id=CHAIN_ID)


@pytest.fixture
def no_sleep():
    delays = []

    async def sleep(seconds):
        delays.append(seconds)

    sleep.delays = delays
    return sleep
