"""Domain services: store, translation cache, auth."""
