"""Test configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Ensure the src/ directory is on sys.path so `import bankcore` works without installation.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if SRC_PATH.exists():
    sys.path.insert(0, str(SRC_PATH))

from bankcore.bank import Bank  # noqa: E402
from bankcore.config.settings import (  # noqa: E402
    AssetSettings,
    LimitSettings,
    OracleSettings,
    Settings,
    SwapSettings,
)
from fakes import (  # noqa: E402
    LINK,
    LINK_FEED,
    NATIVE_FEED,
    ONE_LINK,
    ONE_USDC,
    START,
    USDC,
    WETH,
    FakeCustody,
    FakeExchange,
    FakeMetadata,
    FakePriceSource,
    MutableClock,
    RecordingSink,
    StaticAuthorizer,
    SwitchableHalt,
)


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock(START)


@pytest.fixture
def price_source() -> FakePriceSource:
    source = FakePriceSource()
    # $15.00 and $2,000.00 with 8 feed decimals.
    source.set_price(LINK_FEED, 15 * 10**8, updated_at=START - 60)
    source.set_price(NATIVE_FEED, 2_000 * 10**8, updated_at=START - 60)
    return source


@pytest.fixture
def custody() -> FakeCustody:
    return FakeCustody()


@pytest.fixture
def exchange(custody: FakeCustody) -> FakeExchange:
    exchange = FakeExchange(custody)
    exchange.quotes[(LINK, WETH, USDC)] = 150 * ONE_USDC
    exchange.quotes[(LINK, USDC)] = 148 * ONE_USDC
    return exchange


@pytest.fixture
def metadata() -> FakeMetadata:
    return FakeMetadata({LINK: 18, "DAI": 18, WETH: 18})


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def halt() -> SwitchableHalt:
    return SwitchableHalt()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        assets=AssetSettings(native_price_feed=NATIVE_FEED),
        limits=LimitSettings(global_cap=100_000),
        oracle=OracleSettings(),
        swap=SwapSettings(),
    )


@pytest.fixture
def bank(settings, price_source, exchange, custody, metadata, sink, halt, clock) -> Bank:
    return Bank(
        settings=settings,
        price_source=price_source,
        exchange=exchange,
        custody=custody,
        metadata=metadata,
        halt_flag=halt,
        authorizer=StaticAuthorizer({"admin"}),
        events=sink,
        clock=clock,
    )


@pytest.fixture
async def link_bank(bank: Bank) -> Bank:
    """Bank with LINK registered: 1,000 LINK per operation, priced by LINK/USD."""

    await bank.register_token(
        "admin",
        LINK,
        withdrawal_limit=1_000 * ONE_LINK,
        deposit_limit=1_000 * ONE_LINK,
        price_feed=LINK_FEED,
    )
    return bank
