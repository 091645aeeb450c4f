"""Search Battle — race a relational substring lookup against a search engine."""

__version__ = "0.1.0"
