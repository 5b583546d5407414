"""
Tests for the sender.net HTTP client.
The requests session is a MagicMock; no network traffic is made.
"""

from unittest.mock import MagicMock

import pytest
import requests

from sendernet.api import SenderNetApi, is_well_formed_key
from sendernet.core.exceptions import ProviderError
from sendernet.core.models import SubscriptionRequest


def _response(status_code=200, body=None, text=''):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body if body is not None else {}
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def api(session):
    return SenderNetApi('https://api.sender.net/v2/', timeout=5, session=session)


# ---------------------------------------------------------------------------
# check_api_key
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('key', ['', '   ', None, 'two words', 'tab\tinside', 'bad\x00token'])
def test_malformed_keys_are_rejected_without_a_request(api, session, key):
    assert api.check_api_key(key) is False
    session.request.assert_not_called()


def test_well_formed_key_allows_surrounding_whitespace():
    # Textarea input usually ends with a newline
    assert is_well_formed_key('abc.def-123\n')


def test_accepted_key_sends_bearer_token(api, session):
    session.request.return_value = _response(200, {'data': []})

    assert api.check_api_key(' valid-token\n') is True

    method, url = session.request.call_args[0]
    kwargs = session.request.call_args[1]
    assert method == 'GET'
    assert url == 'https://api.sender.net/v2/groups'
    assert kwargs['headers']['Authorization'] == 'Bearer valid-token'
    assert kwargs['params'] == {'limit': 1}
    assert kwargs['timeout'] == 5


@pytest.mark.parametrize('status', [401, 403, 422])
def test_rejected_key_is_false_not_an_error(api, session, status):
    session.request.return_value = _response(status, {'message': 'Unauthenticated.'})
    assert api.check_api_key('some-token') is False


def test_key_check_timeout_is_a_provider_error(api, session):
    session.request.side_effect = requests.Timeout('read timed out')

    with pytest.raises(ProviderError) as excinfo:
        api.check_api_key('some-token')
    assert 'timed out' in str(excinfo.value)


def test_key_check_server_error_is_a_provider_error(api, session):
    session.request.return_value = _response(503, text='Service Unavailable')

    with pytest.raises(ProviderError) as excinfo:
        api.check_api_key('some-token')
    assert excinfo.value.status_code == 503


def test_base_url_without_trailing_slash(session):
    api = SenderNetApi('https://api.sender.net/v2', session=session)
    session.request.return_value = _response(200, {'data': []})

    api.check_api_key('valid-token')

    assert session.request.call_args[0][1] == 'https://api.sender.net/v2/groups'


# ---------------------------------------------------------------------------
# list_all_groups
# ---------------------------------------------------------------------------

def test_list_all_groups_follows_pagination(api, session):
    session.request.side_effect = [
        _response(200, {
            'data': [{'id': 'eZVD4w', 'title': 'Newsletter', 'recipient_count': 10}],
            'links': {'next': 'https://api.sender.net/v2/groups?page=2'},
        }),
        _response(200, {
            'data': [{'id': 7, 'title': 'Promotions'}],
            'links': {'next': None},
        }),
    ]

    groups = api.list_all_groups('valid-token')

    assert groups == [
        {'id': 'eZVD4w', 'title': 'Newsletter'},
        {'id': '7', 'title': 'Promotions'},
    ]
    assert session.request.call_args_list[1][0][1] == 'https://api.sender.net/v2/groups?page=2'


def test_list_all_groups_refuses_next_link_to_another_host(api, session):
    session.request.side_effect = [
        _response(200, {
            'data': [{'id': 1, 'title': 'Newsletter'}],
            'links': {'next': 'https://collector.example.com/groups?page=2'},
        }),
    ]

    with pytest.raises(ProviderError):
        api.list_all_groups('valid-token')

    # The token was only sent to the configured host
    assert session.request.call_count == 1


def test_list_all_groups_refuses_scheme_downgrade(api, session):
    session.request.side_effect = [
        _response(200, {
            'data': [],
            'links': {'next': 'http://api.sender.net/v2/groups?page=2'},
        }),
    ]

    with pytest.raises(ProviderError):
        api.list_all_groups('valid-token')
    assert session.request.call_count == 1


def test_list_all_groups_invalid_json(api, session):
    session.request.return_value = _response(200, ValueError('Expecting value'))

    with pytest.raises(ProviderError):
        api.list_all_groups('valid-token')


def test_list_all_groups_missing_data(api, session):
    session.request.return_value = _response(200, {'message': 'ok'})

    with pytest.raises(ProviderError):
        api.list_all_groups('valid-token')


def test_list_all_groups_repeated_next_link(api, session):
    page = {'data': [], 'links': {'next': 'https://api.sender.net/v2/groups?page=2'}}
    session.request.side_effect = [_response(200, page), _response(200, page)]

    with pytest.raises(ProviderError):
        api.list_all_groups('valid-token')


def test_list_all_groups_connection_error(api, session):
    session.request.side_effect = requests.ConnectionError('connection refused')

    with pytest.raises(ProviderError):
        api.list_all_groups('valid-token')


# ---------------------------------------------------------------------------
# get_subscriber_by_email
# ---------------------------------------------------------------------------

def test_unknown_subscriber_is_none(api, session):
    session.request.return_value = _response(404, {'message': 'Subscriber not found'})
    assert api.get_subscriber_by_email('valid-token', 'a@example.com') is None


def test_known_subscriber_returns_id(api, session):
    session.request.return_value = _response(200, {'data': {'id': 'dqxXzb', 'email': 'a@example.com'}})

    assert api.get_subscriber_by_email('valid-token', 'a@example.com') == 'dqxXzb'
    assert session.request.call_args[0][1] == 'https://api.sender.net/v2/subscribers/a@example.com'


def test_subscriber_email_is_url_quoted(api, session):
    session.request.return_value = _response(404)

    api.get_subscriber_by_email('valid-token', 'a+news@example.com')

    assert session.request.call_args[0][1].endswith('/subscribers/a%2Bnews@example.com')


def test_subscriber_lookup_timeout(api, session):
    session.request.side_effect = requests.Timeout('read timed out')

    with pytest.raises(ProviderError):
        api.get_subscriber_by_email('valid-token', 'a@example.com')


# ---------------------------------------------------------------------------
# create_subscriber
# ---------------------------------------------------------------------------

def test_create_subscriber_posts_payload(api, session):
    session.request.return_value = _response(200, {'success': True, 'data': {'id': 'new'}})
    subscription = SubscriptionRequest('a@example.com', first_name='Alice', last_name='',
                                       group_ids={'7', '12'})

    assert api.create_subscriber('valid-token', subscription) is True

    method, url = session.request.call_args[0]
    assert method == 'POST'
    assert url == 'https://api.sender.net/v2/subscribers'
    assert session.request.call_args[1]['json'] == {
        'email': 'a@example.com',
        'firstname': 'Alice',
        'lastname': '',
        'groups': ['12', '7'],
    }


def test_create_subscriber_without_name_omits_name_fields(api, session):
    session.request.return_value = _response(200, {'success': True})

    api.create_subscriber('valid-token', SubscriptionRequest('b@example.com', group_ids=['7']))

    assert session.request.call_args[1]['json'] == {'email': 'b@example.com', 'groups': ['7']}


def test_create_subscriber_rejected(api, session):
    session.request.return_value = _response(422, {'message': 'The email must be a valid email address.'},
                                             text='{"message": "invalid"}')
    assert api.create_subscriber('valid-token', SubscriptionRequest('a@example.com')) is False


def test_create_subscriber_unsuccessful_body(api, session):
    session.request.return_value = _response(200, {'success': False, 'message': 'Quota exceeded'})
    assert api.create_subscriber('valid-token', SubscriptionRequest('a@example.com')) is False


def test_create_subscriber_accepted_with_empty_body(api, session):
    session.request.return_value = _response(201, ValueError('Expecting value'), text='')
    assert api.create_subscriber('valid-token', SubscriptionRequest('a@example.com')) is True


def test_create_subscriber_server_error(api, session):
    session.request.return_value = _response(500, text='oops')

    with pytest.raises(ProviderError):
        api.create_subscriber('valid-token', SubscriptionRequest('a@example.com'))
