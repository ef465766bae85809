"""Core utilities and shared application primitives.

Modules in this package cover request decoding, declarative field validation,
response envelopes, configuration and middleware for FastAPI services.
"""
