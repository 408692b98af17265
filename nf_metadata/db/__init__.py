"""
Durable storage bindings.
"""
