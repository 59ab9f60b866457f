"""cdrrate core: models, configuration, logging and rating services."""
