"""Integration tests.

Purpose
- Exercise predicates translated to SQL against a real (SQLite) database.

Guidelines
- Use realistic setup/teardown through the fixtures in `tests/fixtures/sqlite.py`.
- Minimize mocking; run the generated statements for real.
"""
