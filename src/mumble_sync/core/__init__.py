"""Control-plane client and async helpers."""
