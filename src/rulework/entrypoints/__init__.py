"""Entry points (user-facing surfaces) of rulework."""
