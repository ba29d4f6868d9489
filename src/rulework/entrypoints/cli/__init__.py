"""The `rulework` command-line interface."""
