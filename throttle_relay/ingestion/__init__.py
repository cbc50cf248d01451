"""Inbound notification routers."""
