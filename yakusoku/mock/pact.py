"""API for declaring a contract and verifying it against the mock server."""
import logging
import os

from ..contract import PACT_SPECIFICATION_VERSION, ContractWriter
from .interaction import Interaction, Request, Response, normalize_request, normalize_response
from .mock_server import Server

log = logging.getLogger(__name__)

PACT_DIR = os.environ.get('YAKUSOKU_PACT_DIR', 'pacts')
LOG_DIR = os.environ.get('YAKUSOKU_LOG_DIR')


class VerificationError(AssertionError):
    pass


def participant_name(participant):
    return getattr(participant, 'name', participant)


class Pact(object):
    """
    Represents a contract between a consumer and provider.

    Interactions are declared with a fluent API and then verified by running
    the consumer's own client code against a mock server. For example:

    >>> from yakusoku import Pact
    >>> pact = Pact('Order Service', 'User Service')
    >>> (pact.given('user 1 exists')
    ...  .upon_receiving('a request to get user 1')
    ...  .with_request('GET', '/users/1')
    ...  .will_respond_with(200, body={'id': 1, 'name': 'John Doe'}))
    >>> pact.verify(lambda url: requests.get(url + '/users/1'))

    The GET request is made to the mock server, which answers with the
    declared body. Once the callable returns, every declared interaction must
    have been requested at least once, otherwise `VerificationError` is raised
    and no contract is written. When they all were, the contract is written to
    `pact_dir`.
    """

    def __init__(self, consumer, provider, pact_dir=None, log_dir=None, host_name='localhost',
                 version=PACT_SPECIFICATION_VERSION):
        """
        Constructor for Pact.

        :param consumer: The consumer for this contract.
        :type consumer: str or yakusoku.Consumer
        :param provider: The provider for this contract.
        :type provider: str or yakusoku.Provider
        :param pact_dir: Directory where the resulting contract file will be
            written. Defaults to $YAKUSOKU_PACT_DIR or `pacts`.
        :type pact_dir: str
        :param log_dir: Directory where the mock server writes a log file per
            provider. Defaults to $YAKUSOKU_LOG_DIR; no file is written when
            neither is set.
        :type log_dir: str
        :param host_name: The host name the mock server binds to.
        :type host_name: str
        :param version: The Pact Specification version recorded in the
            contract metadata.
        :type version: str
        """
        self.consumer = consumer
        self.provider = provider
        self.pact_dir = pact_dir or PACT_DIR
        self.log_dir = log_dir or LOG_DIR
        self.host_name = host_name
        self.version = version
        self.interactions = []
        self._current = None
        self._mock_server = None

    @property
    def consumer_name(self):
        return participant_name(self.consumer)

    @property
    def provider_name(self):
        return participant_name(self.provider)

    @property
    def uri(self):
        """The base URL of the running mock server, or None outside of `verify`."""
        if self._mock_server is None or not self._mock_server.running:
            return None
        return self._mock_server.url

    server_url = uri

    @property
    def current_interaction(self):
        if self._current is None:
            self._current = Interaction()
        return self._current

    def given(self, provider_state):
        """
        Define the provider state for the interaction being declared.

        When the provider verifies this contract, they will use this label to
        set up data that will satisfy the response expectations. It is purely
        informational here.

        :param provider_state: A short sentence describing the state.
        :type provider_state: str
        :rtype: Pact
        """
        self.current_interaction.provider_state = provider_state
        return self

    def upon_receiving(self, description):
        """
        Define the description of the interaction being declared.

        :param description: A unique name for this interaction.
        :type description: str
        :rtype: Pact
        """
        self.current_interaction.description = description
        return self

    def with_request(self, method, path=None, body=None, headers=None, query=None):
        """
        Define the request that the client is expected to perform.

        Either pass the fields individually, or pass a single `Request` or a
        dict of the same fields as the first argument.

        :param method: The HTTP method, or a complete Request / dict.
        :type method: str, Request or dict
        :param path: The path portion of the URI the client will access.
        :type path: str
        :param body: The request body. A dict is matched structurally (extra
            keys in the actual request are allowed), anything else by equality.
        :type body: dict, list, str or None
        :param headers: Headers that must be present on the request.
        :type headers: dict or None
        :param query: Query parameters that must be present, as a dict or a
            URL encoded string.
        :type query: dict, str or None
        :rtype: Pact
        """
        if isinstance(method, (Request, dict)):
            if (path, body, headers, query) != (None, None, None, None):
                raise ValueError('with_request() takes either a Request/dict or individual fields, not both')
            request = normalize_request(method)
        elif isinstance(method, str):
            request = Request(method, path, body=body, headers=headers, query=query).json()
        else:
            raise ValueError(f'request must be a dict, a Request or a method string, not {type(method).__name__}')
        self.current_interaction.request = request
        return self

    def will_respond_with(self, status, headers=None, body=None):
        """
        Define the response the mock server will give and finish the interaction.

        :param status: The HTTP status code, or a complete Response / dict.
        :type status: int, Response or dict
        :param headers: Response headers. Defaults to None.
        :type headers: dict or None
        :param body: The response body; anything other than a string is
            sent JSON encoded.
        :type body: dict, list, str or None
        :rtype: Pact
        """
        if isinstance(status, (Response, dict)):
            if (headers, body) != (None, None):
                raise ValueError('will_respond_with() takes either a Response/dict or individual fields, not both')
            response = normalize_response(status)
        elif isinstance(status, int) and not isinstance(status, bool):
            response = Response(status, headers=headers, body=body).json()
        else:
            raise ValueError(f'response must be a dict, a Response or a status code, not {type(status).__name__}')
        interaction = self.current_interaction
        interaction.response = response
        self.interactions.append(interaction)
        self._current = None
        return self

    def verify(self, exercise):
        """
        Run `exercise` against a fresh mock server and write the contract.

        :param exercise: Called with the mock server's base URL; it should drive
            the consumer's client code through every declared interaction.
        :type exercise: callable
        :return: The path of the written contract file.
        :raises MockServerError: When the mock server can't be started.
        :raises VerificationError: When not all interactions were exercised.
        """
        self.teardown()
        self._mock_server = Server(self.interactions, host_name=self.host_name,
                                   provider_name=self.provider_name, log_dir=self.log_dir)
        try:
            self._mock_server.start()
            exercise(self._mock_server.url)
            unmatched = self._mock_server.unmatched_interactions()
        finally:
            self._mock_server.stop()
        if unmatched:
            descriptions = ', '.join(repr(i.description) for i in unmatched)
            raise VerificationError(f'Unmatched interactions: {descriptions}')
        return self.write_contract()

    def teardown(self):
        """Stop the mock server if one is still running. Safe to call at any time."""
        if self._mock_server is not None:
            self._mock_server.stop()

    def construct_pact(self):
        """Construct the contract JSON data structure for the declared interactions."""
        return self.contract_writer().construct_pact()

    def contract_writer(self):
        return ContractWriter(self.consumer_name, self.provider_name, self.interactions, version=self.version)

    def write_contract(self):
        return self.contract_writer().write(self.pact_dir)
