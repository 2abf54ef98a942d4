"""Avatar handlers, which resolve avatar URLs and populate the cache."""
