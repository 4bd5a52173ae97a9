"""Version handling: npm range resolution, root token parsing and the metadata cache."""
