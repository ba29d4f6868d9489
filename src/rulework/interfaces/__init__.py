"""Outbound ports (interfaces) of rulework."""
