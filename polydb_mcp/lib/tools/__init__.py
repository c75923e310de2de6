"""Tool tables, one module per backend.

Structure:
- arangodb.py: arango_* tools
- cassandra.py: cassandra_* tools
- couchdb.py: couchdb_* tools
- virtuoso.py: virtuoso_* tools

Each module exposes ``TOOLS``, a mapping of tool name to ``ToolSpec``.
"""
