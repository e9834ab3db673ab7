"""Application services built on the repositories."""
