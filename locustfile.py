"""
Crop Yield Performance Testing Suite
------------------------------------
Load testing scenarios for the Crop Yield Prediction API. Simulates
concurrent clients to measure prediction latency (P50, P90, P95).

Run:
    locust -f locustfile.py --host http://localhost:3000
"""

import random
from locust import HttpUser, task, between

CROP_TYPES = ["Wheat", "Corn", "Rice", "Barley"]


class CropYieldTester(HttpUser):
    """
    Simulates an agronomist querying yield forecasts.

    Attributes:
        wait_time (callable): Simulated 'think time' between 1 and 3 seconds.
    """

    wait_time = between(1, 3)

    @task(5)
    def test_predict(self):
        """Benchmarks POST /predict with raw-domain inputs."""
        payload = {
            "inputs": {
                "Crop_Type": random.choice(CROP_TYPES),
                "Rainfall": str(random.uniform(50, 300)),
                "Temperature": str(random.uniform(10, 35)),
            }
        }
        self.client.post("/predict", json=payload, name="POST /predict")

    @task(1)
    def test_health(self):
        self.client.get("/health", name="GET /health")
