"""
Repository layer for data access operations.

Each repository owns one entity type and hands out results wrapped in
RepositoryResult so callers can tell empty data from a failing store.
"""
