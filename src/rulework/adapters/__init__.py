"""Concrete implementations of the rulework interfaces."""
