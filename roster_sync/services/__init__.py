"""Import runner, row-to-command mapping, progress and summary rendering."""
