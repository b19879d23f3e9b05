"""
CORS Relay - forwards every request to a single upstream API and adds
permissive CORS headers to the response.
"""
__version__ = "1.0.0"
