"""Infrastructure layer: registry clients and language-model adapters."""
