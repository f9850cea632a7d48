"""Feed download, parsing and the shared data models."""
