"""Tests for reading the runtime provider selection file."""

import json

from flightmap.providers import FALLBACK_PROVIDER, load_runtime_provider


def write_json(path, data):
    path.write_text(json.dumps(data), encoding='utf-8')
    return path


def test_reads_selected_provider(tmp_path):
    path = write_json(tmp_path / 'runtime-provider.json', {
        'selectedProviderId': 'aviation-edge',
        'selectedProvider': {
            'id': 'aviation-edge',
            'name': 'Aviation Edge',
            'type': 'aviation-edge',
            'baseUrl': '/api/proxy/aviation-edge/flights',
            'attribution': 'Data: Aviation Edge',
        },
        'updatedAt': '2024-01-01T00:00:00Z',
    })

    provider = load_runtime_provider(path)

    assert provider.id == 'aviation-edge'
    assert provider.base_url == '/api/proxy/aviation-edge/flights'


def test_missing_file_falls_back_to_opensky(tmp_path):
    provider = load_runtime_provider(tmp_path / 'nope.json')

    assert provider == FALLBACK_PROVIDER
    assert provider.type == 'opensky'
    assert provider.base_url == 'https://opensky-network.org/api/states/all'


def test_malformed_json_falls_back(tmp_path):
    path = tmp_path / 'runtime-provider.json'
    path.write_text('{not json', encoding='utf-8')

    assert load_runtime_provider(path) == FALLBACK_PROVIDER


def test_missing_selected_provider_falls_back(tmp_path):
    path = write_json(tmp_path / 'runtime-provider.json', {'selectedProviderId': 'opensky'})

    assert load_runtime_provider(path) == FALLBACK_PROVIDER


def test_incomplete_selected_provider_falls_back(tmp_path):
    path = write_json(tmp_path / 'runtime-provider.json', {
        'selectedProvider': {'id': 'opensky', 'type': 'opensky'},
    })

    assert load_runtime_provider(path) == FALLBACK_PROVIDER
