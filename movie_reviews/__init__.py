"""Movie reviews API: review CRUD with cached machine translation."""

__version__ = "1.0.0"
