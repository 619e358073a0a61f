"""Group event scheduling: candidate dates, availability scores and their aggregates."""

__version__ = "1.0.0"
