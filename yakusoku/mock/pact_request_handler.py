import json
import logging
import threading
from urllib.parse import parse_qs

from ..contract import DEFAULT_STATUS
from ..result import RecordResult
from .matcher import RequestMatcher

log = logging.getLogger(__name__)

NO_MATCH_ERROR = 'No matching interaction found'


class ObservedRequest:
    """An HTTP request as it arrived at the mock server."""

    def __init__(self, method, path, query='', headers=None, body=None):
        self.method = method
        self.path = path
        self.query = query
        self.headers = headers if headers is not None else {}
        self.body = body

    def __repr__(self):
        return f'<ObservedRequest {self.method} {self.path}>'


class MockResponse:
    def __init__(self, status, headers=None, body=b''):
        self.status = status
        self.headers = headers if headers is not None else {}
        self.body = body


def encode_body(body):
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode('utf-8')
    return json.dumps(body).encode('utf-8')


def flatten_query(query):
    if isinstance(query, str):
        query = parse_qs(query, keep_blank_values=True)
    return {k: v[0] if isinstance(v, list) and len(v) == 1 else v for k, v in query.items()}


class PactRequestHandler:
    """Replays the canned response of the first declared interaction an observed request matches.

    Matches are recorded (once per interaction) so that interactions the
    consumer never exercised can be reported afterwards.
    """

    def __init__(self, interactions):
        self.interactions = list(interactions)
        self.matched = []
        self._matched_lock = threading.Lock()
        self.log = log

    def handle(self, request):
        for interaction in self.interactions:
            result = RecordResult()
            if RequestMatcher(interaction.request, result).matches(request):
                self.record_match(interaction)
                self.log.info(f'{request.method} {request.path} matched {interaction!r}')
                return self.respond_for_interaction(interaction)
            self.log.debug(f'{request.method} {request.path} is not {interaction!r}: {result.reason}')
        self.log.warning(f'No interaction matched {request.method} {request.path}')
        return self.respond_for_mismatch(request)

    def record_match(self, interaction):
        with self._matched_lock:
            if not any(matched is interaction for matched in self.matched):
                self.matched.append(interaction)

    def unmatched_interactions(self):
        with self._matched_lock:
            matched = list(self.matched)
        return [i for i in self.interactions if not any(i is m for m in matched)]

    def respond_for_interaction(self, interaction):
        response = interaction.response
        headers = {}
        declared = response.get('headers', {})
        if 'body' in response and not any(h.lower() == 'content-type' for h in declared):
            headers['Content-Type'] = 'application/json'
        headers.update({k: str(v) for k, v in declared.items()})
        body = encode_body(response['body']) if 'body' in response else b''
        return MockResponse(response.get('status', DEFAULT_STATUS), headers, body)

    def respond_for_mismatch(self, request):
        diagnostic = {
            'error': NO_MATCH_ERROR,
            'request': {
                'method': request.method,
                'path': request.path,
                'query': flatten_query(request.query),
            },
        }
        return MockResponse(500, {'Content-Type': 'application/json'}, encode_body(diagnostic))
