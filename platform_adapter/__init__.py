"""
Platform Adapter.

Translates between the canonical marketplace schema and external platform
schemas, and relays requests and events over an MQTT broker.
"""

__version__ = "0.1.0"
