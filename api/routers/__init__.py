"""
API Routers - Organized endpoint handlers for the Circles API.

Each router handles a specific domain:
- suggestions: Connection suggestions and friend search
- connection_requests: Send, resolve and withdraw connection requests
"""
