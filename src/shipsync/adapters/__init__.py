"""Adapters connecting the domain to the carrier API and the record store."""
