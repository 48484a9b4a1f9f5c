"""
Static Responder

A loopback HTTP server that answers every request with a fixed body, plus a
small client for checking a running instance.
"""

from .server import HOST, PORT, BODY, BindFailure, StaticHandler, StaticResponderServer, start

__version__ = '0.1.0'

__all__ = [
    'HOST',
    'PORT',
    'BODY',
    'BindFailure',
    'StaticHandler',
    'StaticResponderServer',
    'start',
]
