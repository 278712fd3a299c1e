"""
Tests for Document Compare API Routes
=====================================
Exercises the blueprint through the Flask test client.
"""

import pytest

from app import create_app
from config_logging import DocCompareError
from document_compare.differ import DocumentDiffer
from .trees import node, doc, paragraphs, table


@pytest.fixture
def client():
    app = create_app({'TESTING': True})
    with app.test_client() as client:
        yield client


class TestCompareEndpoint:
    """Tests for POST /api/compare/compare."""

    def test_compare(self, client):
        response = client.post('/api/compare/compare', json={
            'left': paragraphs("The cat sat.").to_dict(),
            'right': paragraphs("The cat sat.", "It was calm.").to_dict(),
        })
        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        result = data['result']
        assert result['summary'] == {'additions': 1, 'deletions': 0, 'changes': 1}
        assert result['degraded'] is False
        assert result['changes'][0]['kind'] == 'added'
        assert '[Content added in other document]' in result['leftView']['html']

    def test_table_and_image(self, client):
        left = doc(table(['Revenue: 100']), node('img', src='a.png', alt='A'))
        right = doc(table(['Revenue: 200']))
        response = client.post('/api/compare/compare', json={
            'left': left.to_dict(), 'right': right.to_dict()
        })
        detailed = response.get_json()['result']['detailed']
        assert detailed['tables'][0]['status'] == 'MODIFIED'
        assert detailed['images'][0]['status'] == 'REMOVED'

    def test_missing_side_is_empty(self, client):
        response = client.post('/api/compare/compare', json={
            'left': None, 'right': paragraphs("Only right").to_dict()
        })
        assert response.status_code == 200
        assert response.get_json()['result']['summary']['additions'] == 1

    def test_node_without_tag_rejected(self, client):
        response = client.post('/api/compare/compare', json={
            'left': {'text': 'no tag'}, 'right': None
        })
        assert response.status_code == 400
        error = response.get_json()['error']
        assert error['code'] == 'VALIDATION_ERROR'
        assert error['correlation_id'] != 'unknown'

    def test_children_must_be_list(self, client):
        response = client.post('/api/compare/compare', json={
            'left': {'tag': 'body', 'children': 'oops'}, 'right': None
        })
        assert response.status_code == 400

    def test_body_must_be_object(self, client):
        response = client.post('/api/compare/compare', data='not json',
                               content_type='text/plain')
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_validation_envelope_details(self, client):
        response = client.post('/api/compare/compare', json={
            'left': None, 'right': {'tag': 'body', 'children': [['p']]}
        })
        error = response.get_json()['error']
        assert error['details'] == {'field': 'right'}
        assert error['message'].startswith('Malformed right document')

    def test_library_error_uses_its_status(self, client, monkeypatch):
        def unavailable(self, left, right):
            raise DocCompareError("Comparison unavailable", code='UNAVAILABLE', status_code=503)
        monkeypatch.setattr(DocumentDiffer, 'compare', unavailable)

        response = client.post('/api/compare/compare', json={'left': None, 'right': None})
        assert response.status_code == 503
        error = response.get_json()['error']
        assert error['code'] == 'UNAVAILABLE'
        assert error['message'] == 'Comparison unavailable'
        assert error['correlation_id'] != 'unknown'

    def test_unexpected_error_is_internal(self, client, monkeypatch):
        def crash(self, left, right):
            raise RuntimeError("secret internals")
        monkeypatch.setattr(DocumentDiffer, 'report', crash)

        response = client.post('/api/compare/report', json={'left': None, 'right': None})
        assert response.status_code == 500
        error = response.get_json()['error']
        assert error['code'] == 'INTERNAL_ERROR'
        assert 'secret' not in error['message']


class TestReportEndpoint:
    """Tests for POST /api/compare/report."""

    def test_report(self, client):
        response = client.post('/api/compare/report', json={
            'left': doc(node('p', 'Same text', bold=True)).to_dict(),
            'right': doc(node('p', 'Same text')).to_dict(),
        })
        assert response.status_code == 200
        detailed = response.get_json()['detailed']
        assert detailed['lines'][0]['status'] == 'FORMATTING-ONLY'
        assert detailed['lines'][0]['formatChanges'] == ['bold: on → off']


class TestHealth:
    """Tests for the liveness probe."""

    def test_health(self, client):
        data = client.get('/api/health').get_json()
        assert data['status'] == 'ok'
        assert data['engine_version'] == '2.0.0'
