"""Per-backend query and statement builders.

Structure:
- aql.py: ArangoDB traversal queries and index definitions
- cql.py: Cassandra INSERT/UPDATE/DELETE/DDL statements and batches
- couch.py: CouchDB REST requests (method, path, body)
- sparql.py: Virtuoso SPARQL queries and updates
"""
