"""
Proxy Gateway service package.

The gateway fronts the backend services and forwards every request to the
backend that owns its path:

- Routing: ordered path-prefix rules, default service ``auth``
- Header sanitization and correlation id propagation
- One attempt per request with a fixed timeout
- Uniform ``ProxyError`` responses for transport and upstream failures

Structure:
- app.main: FastAPI app, CORS, and the dispatch route.
- app.proxy: routing, forwarding, classification and health probes.
"""
