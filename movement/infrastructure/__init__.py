"""
Infrastructure layer - Adapters, monitoring, and observability.

This layer contains:
- Adapters (in-memory read model and replay index, HTTP collaborators, clock)
- Stubs (test doubles for collaborators without a real adapter)
- Monitoring (Prometheus metrics)
- Observability (structlog configuration, correlation ids)
"""
