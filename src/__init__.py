"""docindex: markdown documentation cache, fingerprint index and discovery."""
