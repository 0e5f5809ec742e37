"""Decide whether an observed HTTP request satisfies one expected request.

The expected side is strict: every declared query parameter, header and body
key must be present and equal. The observed side may carry anything extra.
"""
import json
import logging
from urllib.parse import parse_qs

from ..result import RecordResult

log = logging.getLogger(__name__)

MISSING = object()


def present(item):
    return 'present' if item is not MISSING else 'absent'


def nice_type(value):
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, (list, tuple)):
        return 'array'
    if isinstance(value, dict):
        return 'object'
    if value is None:
        return 'null'
    return type(value).__name__


def json_equal(data, spec):
    # True == 1 in Python but not in JSON
    if isinstance(data, bool) or isinstance(spec, bool):
        return type(data) is type(spec) and data == spec
    if isinstance(spec, dict):
        if not isinstance(data, dict) or len(data) != len(spec):
            return False
        return all(k in data and json_equal(data[k], v) for k, v in spec.items())
    if isinstance(spec, (list, tuple)):
        if not isinstance(data, (list, tuple)) or len(data) != len(spec):
            return False
        return all(json_equal(d, s) for d, s in zip(data, spec))
    return data == spec


class RequestMatcher:
    interaction_name = 'Request'

    def __init__(self, expected, result=None):
        self.method = expected.get('method', MISSING)
        self.path = expected.get('path', MISSING)
        self.query = expected.get('query', MISSING)
        self.headers = expected.get('headers', MISSING)
        self.body = expected.get('body', MISSING)
        self.result = result if result is not None else RecordResult()

    def log_context(self):
        log.debug(f'Matching Request: method={self.method if self.method is not MISSING else None}, '
                  f'path={present(self.path)}, query={present(self.query)}, '
                  f'headers={present(self.headers)}, body={present(self.body)}')

    def matches(self, request):
        self.result.start(request)
        self.log_context()
        return (self.match_method(request) and self.match_path(request) and self.match_query(request)
                and self.match_headers(request) and self.match_body(request))

    def match_method(self, request):
        if self.method is MISSING:
            return self.result.fail('Request method is not declared')
        if request.method.lower() != str(self.method).lower():
            return self.result.fail(f'Request method {request.method!r} does not match expected {self.method!r}')
        return True

    def match_path(self, request):
        if self.path is MISSING:
            return self.result.fail('Request path is not declared')
        if request.path != self.path:
            return self.result.fail(f'Request path {request.path!r} does not match expected {self.path!r}')
        return True

    def match_query(self, request):
        if self.query is MISSING:
            return True
        request_query = request.query
        if isinstance(request_query, str):
            request_query = parse_qs(request_query, keep_blank_values=True)
        else:
            request_query = {k: list(v) if isinstance(v, (list, tuple)) else [v] for k, v in request_query.items()}
        for name, value in self.query.items():
            expected = [str(v) for v in value] if isinstance(value, (list, tuple)) else [str(value)]
            if name not in request_query:
                return self.result.fail(f'Request query parameter {name!r} is missing')
            if request_query[name] != expected:
                return self.result.fail(f'Request query parameter {name!r} value {request_query[name]!r} '
                                        f'does not match expected {expected!r}')
        return True

    def match_headers(self, request):
        if self.headers is MISSING:
            return True
        for header, expected in self.headers.items():
            for actual in request.headers:
                if header.lower() != actual.lower():
                    continue
                actual = request.headers[actual]
                if str(actual).lower() != str(expected).lower():
                    return self.result.fail(f'{self.interaction_name} header {header} value {actual!r} does not '
                                            f'match expected {expected!r}')
                break
            else:
                return self.result.fail(f'{self.interaction_name} missing header {header!r}')
        return True

    def match_body(self, request):
        if self.body is MISSING:
            return True
        raw = request.body
        if not raw:
            return self.result.fail(f'{self.interaction_name} body is empty but a body is expected')
        if isinstance(raw, bytes):
            try:
                raw = raw.decode('utf-8')
            except UnicodeDecodeError:
                return self.result.fail(f'{self.interaction_name} body is not UTF-8 text')
        try:
            data = json.loads(raw)
        except ValueError:
            # a raw string expectation may be met by a non-JSON body
            if isinstance(self.body, str) and raw == self.body:
                return True
            return self.result.fail(f'{self.interaction_name} body is not valid JSON')
        if isinstance(self.body, dict):
            return self.compare_dict(data, self.body, ['body'])
        if not json_equal(data, self.body):
            return self.result.fail(f'{self.interaction_name} body {data!r} does not equal expected {self.body!r}')
        return True

    def compare_dict(self, data, spec, path):
        if not isinstance(data, dict):
            return self.result.fail(f'{self.interaction_name} element is not an object (is {nice_type(data)})', path)
        for key, expected in spec.items():
            name = key if key in data else str(key)
            if name not in data:
                return self.result.fail(f'{self.interaction_name} element {name!r} is missing', path)
            p = path + [name]
            if isinstance(expected, dict):
                if not self.compare_dict(data[name], expected, p):
                    return False
            elif not json_equal(data[name], expected):
                return self.result.fail(f'{self.interaction_name} element {name} ({nice_type(data[name])}) '
                                        f'does not match expected {expected!r}', path)
        return True


def match(expected, request, result=None):
    """Return True if the observed `request` satisfies the `expected` request mapping."""
    return RequestMatcher(expected, result).matches(request)
