"""Consumer-driven contract testing against an in-process mock provider."""
from .contract import ContractError, ContractWriter, load_contract
from .mock.consumer import Consumer
from .mock.interaction import Interaction, Request, Response
from .mock.mock_server import MockServerError, Server
from .mock.pact import Pact, VerificationError
from .mock.provider import Provider

__all__ = (
    "Consumer",
    "ContractError",
    "ContractWriter",
    "Interaction",
    "MockServerError",
    "Pact",
    "Provider",
    "Request",
    "Response",
    "Server",
    "VerificationError",
    "load_contract",
)
