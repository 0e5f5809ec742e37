"""Reading, writing and validating contract files."""
import json
import logging
import os
import re

import semver

from .__version__ import __version__

log = logging.getLogger(__name__)

PACT_SPECIFICATION_VERSION = '3.0.0'
CLIENT_NAME = 'yakusoku-python'
VALID_METHODS = {'GET', 'POST', 'PUT', 'DELETE', 'PATCH', 'HEAD', 'OPTIONS'}
MAX_NAME_LENGTH = 255
DEFAULT_STATUS = 200


class ContractError(ValueError):
    pass


def normalize_name(name):
    return re.sub(r'[^a-z0-9]+', '_', name.lower()).strip('_')


def contract_filename(consumer, provider):
    return f'{normalize_name(consumer)}-{normalize_name(provider)}.json'


def ensure_pact_dir(pact_dir):
    if not os.path.exists(pact_dir):
        log.debug(f'Creating pact directory {pact_dir}')
        os.makedirs(pact_dir)


def dumps(contract):
    return json.dumps(contract, indent=2) + '\n'


class ContractWriter:
    """Serializes the interactions between one consumer and one provider to a contract file.

    >>> writer = ContractWriter('Order Service', 'User Service', pact.interactions)
    >>> writer.write('pacts')
    'pacts/order_service-user_service.json'
    """

    def __init__(self, consumer, provider, interactions, version=PACT_SPECIFICATION_VERSION):
        self.consumer = consumer
        self.provider = provider
        self.interactions = interactions
        self.version = version

    @property
    def filename(self):
        return contract_filename(self.consumer, self.provider)

    def construct_pact(self):
        """Construct the contract JSON data structure for all interactions."""
        return dict(
            consumer={'name': self.consumer},
            provider={'name': self.provider},
            interactions=[self.interaction_json(i) for i in self.interactions],
            metadata=dict(
                pactSpecification=dict(version=self.version),
                client=dict(name=CLIENT_NAME, version=__version__),
            ),
        )

    def interaction_json(self, interaction):
        data = interaction.json()
        if data['description'] is None:
            log.warning(f'Interaction {interaction.request} has no description; writing an empty one')
            data['description'] = ''
        if 'status' not in data['response']:
            # the mock server replays 200 for these
            data['response'] = {'status': DEFAULT_STATUS, **data['response']}
        return data

    def write(self, pact_dir):
        ensure_pact_dir(pact_dir)
        path = os.path.join(pact_dir, self.filename)
        with open(path, 'w') as f:
            f.write(dumps(self.construct_pact()))
        log.info(f'Wrote {len(self.interactions)} interaction(s) to {path}')
        return path


def parse_contract(text):
    if not text or not text.strip():
        raise ContractError('Unable to parse contract JSON: empty data')
    try:
        contract = json.loads(text)
    except ValueError as e:
        raise ContractError(f'Unable to parse contract JSON: {e}') from e
    if not isinstance(contract, dict):
        raise ContractError('Unable to parse contract JSON: top level is not an object')
    return contract


def load_contract(path):
    with open(path) as f:
        return parse_contract(f.read())


def validate_contract(contract, result):
    """Check a parsed contract for structural problems, reporting each one through `result`.

    Every problem found is passed to ``result.fail()``; the return value is
    ``result.success``.
    """
    for role in ('consumer', 'provider'):
        name = (contract.get(role) or {}).get('name')
        if not name:
            result.fail(f'{role} name is required', [role])
        elif len(name) > MAX_NAME_LENGTH:
            result.fail(f'{role} name must be {MAX_NAME_LENGTH} characters or less', [role])

    interactions = contract.get('interactions') or []
    if not interactions:
        result.fail('at least one interaction is required', ['interactions'])
    for index, interaction in enumerate(interactions):
        validate_interaction(interaction, ['interactions', index], result)

    version = ((contract.get('metadata') or {}).get('pactSpecification') or {}).get('version')
    if version is None:
        result.warn('metadata.pactSpecification.version is missing')
    else:
        try:
            semver.Version.parse(str(version))
        except ValueError:
            result.fail(f'pact specification version {version!r} is not a semantic version',
                        ['metadata', 'pactSpecification', 'version'])
    return result.success


def validate_interaction(interaction, path, result):
    if not interaction.get('description'):
        result.fail('description is required', path)
    request = interaction.get('request') or {}
    method = str(request.get('method', '')).upper()
    if method not in VALID_METHODS:
        result.fail(f'invalid HTTP method: {request.get("method")!r}', path + ['request'])
    request_path = request.get('path')
    if not request_path:
        result.fail('request path is required', path + ['request'])
    elif not request_path.startswith('/'):
        result.fail('request path must start with /', path + ['request'])
    status = (interaction.get('response') or {}).get('status')
    if not isinstance(status, int) or isinstance(status, bool) or not 100 <= status <= 599:
        result.fail(f'invalid HTTP status code: {status!r} (must be 100-599)', path + ['response'])
