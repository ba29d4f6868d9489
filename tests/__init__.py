"""rulework test suite.

Folder taxonomy
- unit/         : Isolated, fast checks of a single module/class/function.
- contract/     : Behavior every QueryEvaluator implementation must share.
- integration/  : Predicates translated and run against a real SQLite database.
- e2e/          : The `rulework` CLI driven through click's CliRunner.
- fixtures/     : Pytest fixtures loaded through `pytest_plugins`.
- helpers/      : Shared models, rules and workflows (no tests here).

General guidance
- Tests are marked after their top-level folder by `tests/conftest.py`.
- Property-based tests live with the layer they exercise and use @pytest.mark.property.
"""
