import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

from coffeeshop.events import reset_event_sink, set_event_sink
from coffeeshop.events.adapters import InMemoryEventSink
from coffeeshop.notifications import reset_notifier, set_notifier
from coffeeshop.notifications.log_adapter import LoggingNotifier
from coffeeshop.payments import reset_gateway, set_gateway
from coffeeshop.payments.fake_adapter import FakePaymentGateway


@pytest.fixture(scope="session")
def coffeeshop_bed():
    from coffeeshop.domain import coffeeshop

    bed = DomainFixture(coffeeshop)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(coffeeshop_bed):
    with coffeeshop_bed.domain_context():
        yield
        for _, provider in current_domain.providers.items():
            provider._data_reset()


@pytest.fixture(autouse=True)
def event_sink():
    sink = InMemoryEventSink()
    set_event_sink(sink)
    yield sink
    reset_event_sink()


@pytest.fixture(autouse=True)
def gateway():
    fake = FakePaymentGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()


@pytest.fixture(autouse=True)
def notifier():
    fake = LoggingNotifier()
    set_notifier(fake)
    yield fake
    reset_notifier()
