"""Domain layer (pure logic).

- Keep game rules, seed mixing and payout math here.
- Avoid I/O: no DB sessions, no HTTP/FastAPI, no entropy fetches.
- Prefer deterministic functions (seeds and time passed in as arguments if needed).
"""
