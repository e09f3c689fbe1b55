# tests/test_api/test_datasets.py
import unittest

from fastapi.testclient import TestClient

from captionhub.main import app
from tests.test_api.helpers import create_user_with_key


class DatasetsTestCase(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)
        self.user_id, self.headers = create_user_with_key()
        _, self.other_headers = create_user_with_key()
        _, self.admin_headers = create_user_with_key(is_admin=True)

    def create_dataset(self, name="captions", is_public=True, headers=None):
        response = self.client.post(
            "/api/v1/datasets/",
            headers=headers or self.headers,
            json={"name": name, "description": "test set", "is_public": is_public},
        )
        self.assertEqual(response.status_code, 201)
        return response.json()

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "healthy", "database": "ok"})
        self.assertIn("X-Request-ID", response.headers)

    def test_create_dataset(self):
        dataset = self.create_dataset(name="Flowers")
        self.assertEqual(dataset["name"], "Flowers")
        self.assertEqual(dataset["user_id"], self.user_id)
        self.assertTrue(dataset["is_public"])

    def test_create_requires_api_key(self):
        response = self.client.post("/api/v1/datasets/", json={"name": "anonymous"})
        self.assertEqual(response.status_code, 401)

    def test_invalid_api_key(self):
        response = self.client.post(
            "/api/v1/datasets/", headers={"X-API-Key": "chub_not-a-real-key"}, json={"name": "x"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "Invalid API Key")

    def test_inactive_user(self):
        _, headers = create_user_with_key(is_active=False)
        response = self.client.post("/api/v1/datasets/", headers=headers, json={"name": "x"})
        self.assertEqual(response.status_code, 401)

    def test_private_dataset_visibility(self):
        dataset = self.create_dataset(is_public=False)
        url = f"/api/v1/datasets/{dataset['id']}"

        self.assertEqual(self.client.get(url, headers=self.headers).status_code, 200)
        self.assertEqual(self.client.get(url, headers=self.admin_headers).status_code, 200)
        self.assertEqual(self.client.get(url, headers=self.other_headers).status_code, 403)
        self.assertEqual(self.client.get(url).status_code, 403)

    def test_public_dataset_is_visible_anonymously(self):
        dataset = self.create_dataset()
        response = self.client.get(f"/api/v1/datasets/{dataset['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["id"], dataset["id"])

    def test_list_datasets(self):
        public = self.create_dataset(name="public one")
        private = self.create_dataset(name="private one", is_public=False)

        anonymous_ids = [d["id"] for d in self.client.get("/api/v1/datasets/?limit=1000").json()]
        owner_ids = [d["id"] for d in self.client.get("/api/v1/datasets/?limit=1000", headers=self.headers).json()]
        other_ids = [d["id"] for d in self.client.get("/api/v1/datasets/?limit=1000", headers=self.other_headers).json()]

        self.assertIn(public["id"], anonymous_ids)
        self.assertNotIn(private["id"], anonymous_ids)
        self.assertIn(private["id"], owner_ids)
        self.assertNotIn(private["id"], other_ids)

    def test_missing_dataset(self):
        response = self.client.get("/api/v1/datasets/999999", headers=self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Dataset not found")

    def test_creation_is_recorded_as_activity(self):
        dataset = self.create_dataset()
        response = self.client.get(f"/api/v1/datasets/{dataset['id']}/activity", headers=self.headers)

        self.assertEqual(response.status_code, 200)
        activity = response.json()
        self.assertEqual(len(activity), 1)
        self.assertEqual(activity[0]["activity_type"], "dataset_created")
        self.assertEqual(activity[0]["user_id"], self.user_id)
