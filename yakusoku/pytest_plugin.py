import pytest

from .mock.pact import Pact


def pytest_addoption(parser):
    parser.addoption("--pact-dir", default=None,
                     help="directory contract files are written to (default $YAKUSOKU_PACT_DIR or ./pacts)")


class PactFactory:
    """Creates Pact sessions for one test and tears all of them down afterwards."""

    def __init__(self, pact_dir=None):
        self.pact_dir = pact_dir
        self.pacts = []

    def __call__(self, consumer, provider, **kwargs):
        if self.pact_dir:
            kwargs.setdefault('pact_dir', self.pact_dir)
        pact = Pact(consumer, provider, **kwargs)
        self.pacts.append(pact)
        return pact

    def teardown(self):
        for pact in self.pacts:
            pact.teardown()


@pytest.fixture()
def pact_factory(pytestconfig):
    factory = PactFactory(pytestconfig.getoption('pact_dir'))
    yield factory
    factory.teardown()
