"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports (HTTP listing client,
    image cache, reachability probing and local JSON storage).

Dependencies:
    Individual submodules depend on ``requests``, ``Pillow``, filesystem APIs
    and domain protocol definitions.

Call context:
    Imported by the composition root (for runtime wiring) and by tests (for
    transport-level behavior verification).
"""
