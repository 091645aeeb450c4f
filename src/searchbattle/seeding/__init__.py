"""Load the same CSV corpus into both backends."""

from searchbattle.seeding.loader import read_corpus, seed_index, seed_relational

__all__ = ["read_corpus", "seed_index", "seed_relational"]
