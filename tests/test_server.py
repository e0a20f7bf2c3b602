"""
Tests for the HTTP API.
"""

import math
import pytest
import sys
import os

from fastapi.testclient import TestClient

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dashmath.components.config import Config
from dashmath.components.server import Server
from dashmath.dataset import DatasetManager

TOY_RECORDS = [
    {'a': 0.0, 'b': 1.0, 'label': 'x'},
    {'a': 1.0, 'b': 0.0, 'label': 'x'},
    {'a': 0.5, 'b': 0.5, 'label': 'x'},
    {'a': 9.0, 'b': 10.0, 'label': 'y'},
    {'a': 10.0, 'b': 9.0, 'label': 'y'},
    {'a': 9.5, 'b': 9.0, 'label': 'y'},
]


@pytest.fixture
def client():
    """Test client over a server with the built-in datasets."""
    config = Config({'datasets': {'load-synthetic': True}})
    server = Server(DatasetManager(config), config)
    return TestClient(server.app)


class TestDatasetRoutes:
    """Tests for the dataset endpoints."""

    def test_health(self, client):
        """Health check responds."""
        response = client.get('/health')
        assert response.status_code == 200
        assert response.json() == {'status': 'ok'}

    def test_list_datasets(self, client):
        """Built-in datasets are listed."""
        response = client.get('/api/v1/datasets')

        assert response.status_code == 200
        names = [d['name'] for d in response.json()]
        assert names == ['Wine Quality', 'Iris Flowers', 'Breast Cancer']

    def test_register_and_analyze(self, client):
        """An uploaded dataset can be analyzed."""
        response = client.post('/api/v1/datasets/toy', json={'records': TOY_RECORDS})
        assert response.status_code == 200
        assert response.json()['features'] == ['a', 'b']

        response = client.post('/api/v1/datasets/toy/analysis', json={'model': 'mindist'})
        assert response.status_code == 200

        result = response.json()
        assert result['classes'] == ['x', 'y']
        assert result['metrics']['accuracy'] == 1.0
        assert result['metrics']['confusion_matrix'] == [[3, 0], [0, 3]]
        assert len(result['pca']['eigenvalues']) == 2
        assert len(result['projections']) == 6

    def test_analyze_builtin(self, client):
        """A built-in dataset can be analyzed with a feature selection."""
        response = client.post('/api/v1/datasets/Iris Flowers/analysis',
                               json={'features': ['Petal_L', 'Petal_W']})

        assert response.status_code == 200
        result = response.json()
        assert result['features'] == ['Petal_L', 'Petal_W']
        assert len(result['density']['surfaces']) == 3

    def test_analyze_unknown_dataset(self, client):
        """Unknown datasets give 404."""
        response = client.post('/api/v1/datasets/nope/analysis', json={})
        assert response.status_code == 404

    def test_analyze_bad_feature(self, client):
        """Unknown features give 400."""
        response = client.post('/api/v1/datasets/Iris Flowers/analysis',
                               json={'features': ['Petal_X']})
        assert response.status_code == 400

    def test_analyze_bad_model(self, client):
        """Unknown models give 400."""
        response = client.post('/api/v1/datasets/Iris Flowers/analysis',
                               json={'model': 'svm'})
        assert response.status_code == 400

    def test_register_empty(self, client):
        """An empty upload gives 400."""
        response = client.post('/api/v1/datasets/empty', json={'records': []})
        assert response.status_code == 400

    def test_remove(self, client):
        """Datasets can be removed once."""
        assert client.delete('/api/v1/datasets/Wine Quality').status_code == 200
        assert client.delete('/api/v1/datasets/Wine Quality').status_code == 404


class TestMathRoutes:
    """Tests for the stateless math endpoints."""

    def test_pca(self, client):
        """PCA returns eigenpairs and projections."""
        response = client.post('/api/v1/pca', json={
            'matrix': [[1.0, 2.0], [2.0, 4.1], [3.0, 5.9], [4.0, 8.2]]
        })

        assert response.status_code == 200
        result = response.json()
        assert len(result['eigenvalues']) == 2
        assert math.isclose(sum(result['explained_variance']), 1.0)
        assert len(result['projections'][0]) == 3

    def test_pca_ragged(self, client):
        """Ragged matrices give 400."""
        response = client.post('/api/v1/pca', json={'matrix': [[1.0, 2.0], [3.0]]})
        assert response.status_code == 400

    def test_pca_invalid_body(self, client):
        """Malformed bodies give 422."""
        response = client.post('/api/v1/pca', json={'matrix': 'abc'})
        assert response.status_code == 422

    def test_classify(self, client):
        """Classification on the training matrix includes metrics."""
        response = client.post('/api/v1/classify', json={
            'matrix': [[0, 0], [0, 0], [10, 10], [10, 10]],
            'labels': ['A', 'A', 'B', 'B'],
            'model': 'bayes'
        })

        assert response.status_code == 200
        result = response.json()
        assert result['predictions'] == ['A', 'A', 'B', 'B']
        assert result['metrics']['accuracy'] == 1.0

    def test_classify_test_matrix(self, client):
        """A separate test matrix is classified without metrics."""
        response = client.post('/api/v1/classify', json={
            'matrix': [[0, 0], [0, 0], [10, 10], [10, 10]],
            'labels': ['A', 'A', 'B', 'B'],
            'model': 'mindist',
            'test_matrix': [[1, 1], [9, 8]]
        })

        assert response.status_code == 200
        assert response.json() == {'predictions': ['A', 'B']}

    def test_classify_label_mismatch(self, client):
        """Mismatched labels give 400."""
        response = client.post('/api/v1/classify', json={
            'matrix': [[0, 0], [1, 1]],
            'labels': ['A']
        })
        assert response.status_code == 400

    def test_metrics(self, client):
        """Metrics are computed from label vectors."""
        response = client.post('/api/v1/metrics', json={
            'actual': ['a', 'a', 'b', 'b'],
            'predicted': ['a', 'b', 'b', 'b']
        })

        assert response.status_code == 200
        result = response.json()
        assert result['accuracy'] == 0.75
        assert result['confusion_matrix'] == [[1, 1], [0, 2]]

    def test_density(self, client):
        """Densities are evaluated per point."""
        response = client.post('/api/v1/density', json={
            'points': [[0.0, 0.0]],
            'mean': [0.0, 0.0],
            'cov': [[1.0, 0.0], [0.0, 1.0]]
        })

        assert response.status_code == 200
        assert math.isclose(response.json()['densities'][0], 1.0 / (2 * math.pi))
