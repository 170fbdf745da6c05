"""Document decoding and entity extraction."""
