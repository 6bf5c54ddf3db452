"""CSV decoding and tokenizing."""
