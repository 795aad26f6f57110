"""Business logic services.

This package contains the authentication service, the provider catalog,
budget calculations, collaboration workflows and the WebSocket connection
manager used by the chat endpoints.
"""
