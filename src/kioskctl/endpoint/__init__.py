"""HTTP surface for kioskctl.

FastAPI routes that translate requests into session controller calls.
"""
