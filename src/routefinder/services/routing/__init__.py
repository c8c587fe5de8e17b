"""Journey length and bus search."""
