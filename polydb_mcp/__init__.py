"""Uniform MCP tool gateway for ArangoDB, Cassandra, CouchDB and Virtuoso."""

__version__ = "1.0.0"
