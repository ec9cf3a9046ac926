"""
Tests for API endpoints
"""
from conftest import PRIMARY_UUID


class TestHealthEndpoint:
    """Tests for health check endpoint"""

    def test_health_returns_healthy(self, client):
        response = client.get('/api/system/health')
        body = response.get_json()

        assert response.status_code == 200
        assert body['success'] is True
        assert body['data']['database'] == 'healthy'


class TestMetricsEndpoint:
    def test_metrics_exported(self, testmode_client):
        testmode_client.post(
            '/api/shareholder/send-verification-code',
            json={'identifier': PRIMARY_UUID, 'phoneNumber': '0987654321'},
        )

        response = testmode_client.get('/api/metrics')

        assert response.status_code == 200
        assert b'portal_codes_issued_total' in response.data
        assert b'portal_shareholders_total 3.0' in response.data


class TestEnvelope:
    """Every response uses the same envelope"""

    def test_unknown_route(self, client):
        response = client.get('/api/shareholder/nope/nope')

        assert response.status_code == 404
        assert response.get_json()['success'] is False
        assert response.get_json()['error']['code'] == 'NOT_FOUND'

    def test_wrong_method(self, client):
        response = client.delete('/api/shareholder/data/000001')

        assert response.status_code == 405
        assert response.get_json()['success'] is False


class TestProfileEndpoints:
    def test_get_profile(self, client):
        response = client.get('/api/shareholder/data/000001')
        data = response.get_json()['data']

        assert response.status_code == 200
        assert data['shareholderCode'] == '000001'
        assert data['originalAddress'] == '信義路一段1號'
        assert data['updatedAddress'] is None
        assert data['loginCount'] == 0

    def test_get_profile_unknown(self, client):
        response = client.get('/api/shareholder/data/999999')

        assert response.status_code == 404
        assert response.get_json()['error']['code'] == 'SHAREHOLDER_NOT_FOUND'

    def test_get_profile_malformed_code(self, client):
        assert client.get('/api/shareholder/data/1').status_code == 400

    def test_list_is_paginated(self, client):
        response = client.get('/api/shareholder/list?page=1&per_page=2')
        body = response.get_json()

        assert response.status_code == 200
        assert [s['shareholderCode'] for s in body['data']] == ['000001', '000002']
        assert body['pagination']['total'] == 3
        assert body['pagination']['has_more'] is True
        assert body['pagination']['next_page'] == 2

    def test_list_invalid_page(self, client):
        response = client.get('/api/shareholder/list?page=abc')

        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'INVALID_FORMAT'
