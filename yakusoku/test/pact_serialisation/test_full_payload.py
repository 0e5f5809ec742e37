from yakusoku import Consumer, Provider
from yakusoku.__version__ import __version__


def test_full_payload():
    pact = Consumer('consumer').has_pact_with(Provider('provider'))
    (pact
     .given('UserA exists and is not an administrator')
     .upon_receiving('a request for UserA')
     .with_request('get', '/users/UserA', headers={'Accept': 'application/json'}, query='term=test')
     .will_respond_with(200, body={'username': 'UserA'}, headers={'Content-Type': 'application/json'}))
    result = pact.construct_pact()
    assert result == {
        'consumer': {'name': 'consumer'},
        'provider': {'name': 'provider'},
        'interactions': [
            {
                'description': 'a request for UserA',
                'providerState': 'UserA exists and is not an administrator',
                'request': dict(method='get', path='/users/UserA', query={'term': 'test'},
                                headers={'Accept': 'application/json'}),
                'response': dict(status=200, headers={'Content-Type': 'application/json'},
                                 body={'username': 'UserA'})
            }
        ],
        'metadata': dict(pactSpecification=dict(version='3.0.0'),
                         client=dict(name='yakusoku-python', version=__version__))
    }


def test_full_payload_from_mappings():
    pact = Consumer('consumer').has_pact_with(Provider('provider'))
    (pact
     .given('UserA exists and is not an administrator')
     .upon_receiving('a request for UserA')
     .with_request({'method': 'get', 'path': '/users/UserA', 'headers': {'Accept': 'application/json'},
                    'query': 'term=test'})
     .will_respond_with({'status': 200, 'headers': {'Content-Type': 'application/json'},
                         'body': {'username': 'UserA'}}))
    interaction = pact.construct_pact()['interactions'][0]
    assert interaction['request'] == dict(method='get', path='/users/UserA', query={'term': 'test'},
                                          headers={'Accept': 'application/json'})
    assert interaction['response'] == dict(status=200, headers={'Content-Type': 'application/json'},
                                           body={'username': 'UserA'})
