"""Lookup adapter layer — one connector per compared backend.

Built-in adapters:
  - relational: SQL database via SQLAlchemy (case-insensitive substring match)
  - indexed: Elasticsearch v8+ (wildcard ``query_string`` match)

Subclass ``LookupAdapter`` to race another backend.
"""
