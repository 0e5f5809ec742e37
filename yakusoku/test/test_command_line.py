import json
import logging

import pytest

from yakusoku import command_line
from yakusoku.__version__ import __version__
from yakusoku.contract import ContractWriter
from yakusoku.mock.interaction import Interaction


@pytest.fixture(autouse=True)
def no_colorama_wrapping(mocker):
    mocker.patch('yakusoku.command_line.init')


@pytest.fixture
def pact_dir(tmp_path):
    interactions = [
        Interaction('a request to get user 1', 'user 1 exists',
                    {'method': 'GET', 'path': '/users/1', 'headers': {'Accept': 'application/json'}},
                    {'status': 200, 'body': {'id': 1, 'name': 'John Doe'}}),
        Interaction('a request to create a user', None,
                    {'method': 'POST', 'path': '/users', 'query': {'notify': 'true'}, 'body': {'name': 'Jane'}},
                    {'status': 201}),
    ]
    ContractWriter('Order Service', 'User Service', interactions).write(str(tmp_path))
    ContractWriter('Billing', 'User Service', interactions[:1]).write(str(tmp_path))
    (tmp_path / 'broken.json').write_text('{not json')
    (tmp_path / 'notes.txt').write_text('ignored')
    return tmp_path


def test_version(capsys):
    with pytest.raises(SystemExit) as e:
        command_line.main(['--version'])
    assert e.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_command_required(capsys):
    with pytest.raises(SystemExit) as e:
        command_line.main([])
    assert e.value.code == 2


def test_list(pact_dir, capsys):
    assert command_line.main(['list', '--pact-dir', str(pact_dir)]) == 0
    out = capsys.readouterr().out
    assert out.splitlines() == [
        'Contracts:',
        '  billing-user_service.json',
        '    Consumer: Billing',
        '    Provider: User Service',
        '  order_service-user_service.json',
        '    Consumer: Order Service',
        '    Provider: User Service',
    ]


def test_list_json(pact_dir, capsys):
    assert command_line.main(['list', '--pact-dir', str(pact_dir), '--json']) == 0
    assert json.loads(capsys.readouterr().out) == [
        {'file': 'billing-user_service.json', 'consumer': 'Billing', 'provider': 'User Service'},
        {'file': 'order_service-user_service.json', 'consumer': 'Order Service', 'provider': 'User Service'},
    ]


def test_list_pattern(pact_dir, capsys):
    assert command_line.main(['list', '--pact-dir', str(pact_dir), '--pattern', 'order_*.json']) == 0
    out = capsys.readouterr().out
    assert 'order_service-user_service.json' in out
    assert 'billing' not in out


def test_list_empty_directory(tmp_path, capsys):
    assert command_line.main(['list', '--pact-dir', str(tmp_path)]) == 0
    assert capsys.readouterr().out == 'No contracts found\n'


def test_list_missing_directory(tmp_path, capsys):
    assert command_line.main(['list', '--pact-dir', str(tmp_path / 'missing')]) == 1
    assert 'Not a directory' in capsys.readouterr().out


def test_show(pact_dir, capsys):
    assert command_line.main(['show', str(pact_dir / 'order_service-user_service.json')]) == 0
    out = capsys.readouterr().out
    assert 'Contract: Order Service -> User Service' in out
    assert 'Interactions (2):' in out
    assert '  [1] a request to get user 1' in out
    assert '      Provider State: user 1 exists' in out
    assert '        Method: GET' in out
    assert '        Path: /users/1' in out
    assert '          Accept: application/json' in out
    assert '        Body: {"id": 1, "name": "John Doe"}' in out
    assert '  [2] a request to create a user' in out
    assert '        Query: {"notify": "true"}' in out
    assert '        Status: 201' in out
    assert out.count('Provider State:') == 1


def test_show_json(pact_dir, capsys):
    path = pact_dir / 'billing-user_service.json'
    assert command_line.main(['show', str(path), '--json']) == 0
    assert json.loads(capsys.readouterr().out) == json.loads(path.read_text())


@pytest.mark.parametrize('filename', ['broken.json', 'missing.json'])
def test_show_unreadable(pact_dir, capsys, filename):
    assert command_line.main(['show', str(pact_dir / filename)]) == 1
    assert 'Unable to read' in capsys.readouterr().out


def test_validate(pact_dir, capsys):
    files = [str(pact_dir / 'order_service-user_service.json'), str(pact_dir / 'billing-user_service.json')]
    assert command_line.main(['validate'] + files) == 0
    out = capsys.readouterr().out
    assert out.count('PASSED') == 2


def test_validate_failures(pact_dir, capsys):
    invalid = pact_dir / 'invalid.json'
    invalid.write_text(json.dumps({
        'consumer': {'name': 'Order Service'},
        'provider': {'name': 'User Service'},
        'interactions': [{'description': 'x', 'request': {'method': 'FETCH', 'path': '/'},
                          'response': {'status': 200}}],
        'metadata': {'pactSpecification': {'version': '3.0.0'}},
    }))
    files = [str(pact_dir / 'order_service-user_service.json'), str(invalid), str(pact_dir / 'broken.json')]
    assert command_line.main(['validate'] + files) == 1
    out = capsys.readouterr().out
    assert out.count('PASSED') == 1
    assert out.count('FAILED') == 2
    assert "invalid HTTP method: 'FETCH' at interactions[0].request" in out
    assert 'Unable to read contract' in out


@pytest.mark.parametrize('options, level', [
    ([], 'WARNING'),
    (['-v'], 'DEBUG'),
    (['-q'], 'ERROR'),
])
def test_get_log_level(options, level):
    args = command_line.parser.parse_args(['validate', 'x.json'] + options)
    assert command_line.get_log_level(args) == getattr(logging, level)
