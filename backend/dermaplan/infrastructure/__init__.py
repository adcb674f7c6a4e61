"""Infrastructure Layer — logging setup and cache backends.

Invariants:
    - Infrastructure never imports core domain logic beyond errors, keys and protocols
    - Cache failures are mapped to CacheBackendError and never reach the caller
"""
