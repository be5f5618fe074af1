"""Small helpers shared across gasnet modules."""
