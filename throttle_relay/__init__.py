"""DynamoDB throttle relay - capacity load driver and signed incident webhook."""

__version__ = "1.0.0"
