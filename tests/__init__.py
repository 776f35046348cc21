# Armory Live-Server Test Suite
#
# This package contains:
# - API tests against a running server (pytest + httpx)
# - Stress/load tests (Locust)
#
# Run with: python -m pytest tests/api
#           locust -f tests/stress/locustfile.py --host http://127.0.0.1:5001
