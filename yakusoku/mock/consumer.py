"""Classes and methods to describe contract Consumers."""
from .pact import Pact
from .provider import Provider


class Consumer(object):
    """
    A contract consumer.

    Use this class to describe the service making requests to the provider and
    then use `has_pact_with` to create a contract with a specific service:

    >>> from yakusoku import Consumer, Provider
    >>> consumer = Consumer('my-web-front-end')
    >>> consumer.has_pact_with(Provider('my-backend-service'))
    """

    def __init__(self, name, service_cls=Pact):
        """
        Constructor for the Consumer class.

        :param name: The name of this Consumer. This will be shown in the
            contract file.
        :type name: str
        :param service_cls: Pact, or a sub-class of it, to use when creating
            the contracts.
        :type service_cls: yakusoku.Pact
        """
        self.name = name
        self.service_cls = service_cls

    def __repr__(self):
        return f'<Consumer {self.name!r}>'

    def has_pact_with(self, provider, **kwargs):
        """
        Create a contract between the `provider` and this consumer.

        Keyword arguments (`pact_dir`, `log_dir`, `host_name`, `version`) are
        passed through to the Pact.

        :param provider: The provider service for this contract.
        :type provider: yakusoku.Provider
        :return: A Pact object which you can use to define the specific
            interactions your code will have with the provider.
        :rtype: yakusoku.Pact
        """
        if not isinstance(provider, Provider):
            raise ValueError('provider must be an instance of the Provider class.')

        return self.service_cls(consumer=self, provider=provider, **kwargs)
