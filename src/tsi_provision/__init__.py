"""tsi-provision - idempotent Prometheus + Nginx host provisioning."""

__version__ = "0.1.0"
