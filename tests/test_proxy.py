"""Tests for the credential-hiding Aviation Edge proxy."""

import pytest
import requests

from conftest import TEST_API_KEY, make_response
from flightmap.api.proxy import redact_secret

URL = '/api/proxy/aviation-edge/flights'
VALID_QUERY = {'lat': '37.5', 'lng': '-122.3', 'distance': '100'}


def body_text(response):
    return response.get_data(as_text=True)


class TestValidation:

    @pytest.mark.parametrize('query', [
        {},
        {'lng': '-122.3', 'distance': '100'},
        {'lat': '37.5', 'distance': '100'},
        {'lat': '37.5', 'lng': '-122.3'},
        {'lat': '', 'lng': '-122.3', 'distance': '100'},
    ])
    def test_missing_parameters(self, client, upstream_session, query):
        response = client.get(URL, query_string=query)

        assert response.status_code == 400
        assert response.get_json() == {'error': 'Missing required parameters: lat, lng, distance'}
        upstream_session.get.assert_not_called()

    @pytest.mark.parametrize('lat', ['91', '-90.5', 'north', 'nan'])
    def test_invalid_lat(self, client, upstream_session, lat):
        response = client.get(URL, query_string=dict(VALID_QUERY, lat=lat))

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid lat: must be between -90 and 90'
        upstream_session.get.assert_not_called()

    @pytest.mark.parametrize('lng', ['181', '-180.01', 'inf'])
    def test_invalid_lng(self, client, lng):
        response = client.get(URL, query_string=dict(VALID_QUERY, lng=lng))

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid lng: must be between -180 and 180'

    @pytest.mark.parametrize('distance', ['0', '-5', '501', 'far'])
    def test_invalid_distance(self, client, distance):
        response = client.get(URL, query_string=dict(VALID_QUERY, distance=distance))

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid distance: must be between 1 and 500'

    def test_boundary_values_are_accepted(self, client, upstream_session):
        upstream_session.get.return_value = make_response([])

        response = client.get(URL, query_string={'lat': '-90', 'lng': '180', 'distance': '500'})

        assert response.status_code == 200

    def test_missing_credential_is_server_error(self, app, client, upstream_session):
        app.config['AVIATION_EDGE_API_KEY'] = None

        response = client.get(URL, query_string=VALID_QUERY)

        assert response.status_code == 500
        assert response.get_json() == {'error': 'Server configuration error'}
        assert 'key' not in body_text(response).lower()
        assert 'api' not in body_text(response).lower()
        upstream_session.get.assert_not_called()


class TestForwarding:

    def test_injects_key_and_relays_json(self, client, upstream_session):
        payload = [{'aircraft': {'icao24': 'abc123'}, 'status': 'en-route'}]
        upstream_session.get.return_value = make_response(payload)

        response = client.get(URL, query_string=dict(VALID_QUERY, limit='50'))

        assert response.status_code == 200
        assert response.get_json() == payload

        args, kwargs = upstream_session.get.call_args
        assert args == ('https://aviation-edge.test/v2/public/flights',)
        assert kwargs['params'] == {
            'key': TEST_API_KEY,
            'lat': '37.5',
            'lng': '-122.3',
            'distance': '100',
            'limit': '50',
        }

    def test_limit_is_optional(self, client, upstream_session):
        upstream_session.get.return_value = make_response([])

        client.get(URL, query_string=VALID_QUERY)

        assert 'limit' not in upstream_session.get.call_args.kwargs['params']

    def test_upstream_error_object_is_relayed(self, client, upstream_session):
        upstream_session.get.return_value = make_response({'error': 'No Record Found'})

        response = client.get(URL, query_string=VALID_QUERY)

        assert response.status_code == 200
        assert response.get_json() == {'error': 'No Record Found'}


class TestFailures:

    def test_upstream_status_is_propagated_with_generic_message(self, client, upstream_session):
        upstream_session.get.return_value = make_response(
            {'error': f'Invalid key {TEST_API_KEY}'}, status=401
        )

        response = client.get(URL, query_string=VALID_QUERY)

        assert response.status_code == 401
        assert response.get_json() == {'error': 'Aviation Edge API error'}
        assert TEST_API_KEY not in body_text(response)

    def test_non_json_content_type(self, client, upstream_session):
        upstream_session.get.return_value = make_response(content_type='text/html; charset=utf-8')

        response = client.get(URL, query_string=VALID_QUERY)

        assert response.status_code == 502
        assert response.get_json() == {'error': 'Invalid response from Aviation Edge'}

    def test_undecodable_json(self, client, upstream_session):
        upstream_session.get.return_value = make_response(json_error=ValueError('bad json'))

        response = client.get(URL, query_string=VALID_QUERY)

        assert response.status_code == 502
        assert response.get_json() == {'error': 'Invalid response from Aviation Edge'}

    def test_transport_error_never_leaks_key(self, client, upstream_session, caplog):
        upstream_session.get.side_effect = requests.exceptions.ConnectionError(
            f'Max retries exceeded with url: /flights?key={TEST_API_KEY}'
        )

        response = client.get(URL, query_string=VALID_QUERY)

        assert response.status_code == 502
        assert response.get_json() == {'error': 'Failed to fetch flight data'}
        assert TEST_API_KEY not in body_text(response)
        assert TEST_API_KEY not in caplog.text

    def test_any_exception_maps_to_bad_gateway(self, client, upstream_session):
        upstream_session.get.side_effect = Exception(f'failed with key {TEST_API_KEY}')

        response = client.get(URL, query_string=VALID_QUERY)

        assert response.status_code == 502
        assert TEST_API_KEY not in body_text(response)


class TestRedactSecret:

    def test_replaces_every_occurrence(self):
        text = redact_secret('key=abc&again=abc', 'abc')
        assert text == 'key=***REDACTED***&again=***REDACTED***'

    def test_no_secret_leaves_text(self):
        assert redact_secret('nothing to hide', None) == 'nothing to hide'
