"""Value types describing the interactions a consumer expects from a provider."""
import copy
from urllib.parse import parse_qs


class Request:
    """Represents an expected HTTP request."""

    FIELDS = ('method', 'path', 'query', 'headers', 'body')

    def __init__(self, method=None, path=None, query=None, headers=None, body=None):
        """
        Create a new instance of Request.

        Every field is optional so the request may be assembled in stages.

        :param method: The HTTP method that is expected, compared case-insensitively.
        :type method: str
        :param path: The URI path that is expected on this request.
        :type path: str
        :param query: The query parameters that must be present. Either a dict
            of parameter name to value or a URL encoded string.
        :type query: dict or str
        :param headers: The headers that must be present.
        :type headers: dict
        :param body: The contents of the body of the expected request.
        :type body: str, dict, list
        """
        self.method = method
        self.path = path
        self.query = query
        self.headers = headers
        self.body = body

    @classmethod
    def from_mapping(cls, mapping):
        unknown = set(mapping) - set(cls.FIELDS)
        if unknown:
            raise ValueError(f'Unknown request field(s): {", ".join(sorted(map(str, unknown)))}')
        return cls(**mapping)

    def json(self):
        """Convert the Request to its canonical contract mapping."""
        request = {}
        if self.method is not None:
            request['method'] = self.method
        if self.path is not None:
            request['path'] = self.path
        if self.query:
            request['query'] = canonical_query(self.query)
        if self.headers:
            request['headers'] = copy.deepcopy(dict(self.headers))
        if self.body is not None:
            request['body'] = copy.deepcopy(self.body)
        return request


class Response:
    """Represents the HTTP response the provider is expected to produce."""

    FIELDS = ('status', 'headers', 'body')

    def __init__(self, status=None, headers=None, body=None):
        """
        Create a new Response.

        :param status: The expected HTTP status of the response.
        :type status: int
        :param headers: The expected headers of the response.
        :type headers: dict
        :param body: The expected body of the response.
        :type body: str, dict, or list
        """
        self.status = status
        self.headers = headers
        self.body = body

    @classmethod
    def from_mapping(cls, mapping):
        unknown = set(mapping) - set(cls.FIELDS)
        if unknown:
            raise ValueError(f'Unknown response field(s): {", ".join(sorted(map(str, unknown)))}')
        return cls(**mapping)

    def json(self):
        """Convert the Response to its canonical contract mapping."""
        response = {}
        if self.status is not None:
            response['status'] = self.status
        if self.headers:
            response['headers'] = copy.deepcopy(dict(self.headers))
        if self.body is not None:
            response['body'] = copy.deepcopy(self.body)
        return response


class Interaction:
    """One expected request/response pair plus its description and provider state."""

    def __init__(self, description=None, provider_state=None, request=None, response=None):
        self.description = description
        self.provider_state = provider_state
        self.request = request if request is not None else {}
        self.response = response if response is not None else {}

    def __repr__(self):
        return f'<Interaction {self.description!r}>'

    def json(self):
        interaction = {'description': self.description}
        if self.provider_state is not None:
            interaction['providerState'] = self.provider_state
        interaction['request'] = self.request
        interaction['response'] = self.response
        return interaction


def canonical_query(query):
    # URL encoded strings become a mapping; repeated parameters keep every value
    if isinstance(query, str):
        parsed = parse_qs(query, keep_blank_values=True)
        return {k: v[0] if len(v) == 1 else v for k, v in parsed.items()}
    return copy.deepcopy(dict(query))


def normalize_request(request):
    """Reduce a `Request` or a plain mapping to the canonical request mapping."""
    if isinstance(request, Request):
        return request.json()
    if isinstance(request, dict):
        return Request.from_mapping(request).json()
    raise ValueError(f'request must be a dict or a Request, not {type(request).__name__}')


def normalize_response(response):
    """Reduce a `Response` or a plain mapping to the canonical response mapping."""
    if isinstance(response, Response):
        return response.json()
    if isinstance(response, dict):
        return Response.from_mapping(response).json()
    raise ValueError(f'response must be a dict or a Response, not {type(response).__name__}')
