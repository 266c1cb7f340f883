"""Terminal preview of notebooks."""
