"""Domain layer: models, statistics, detection, routing and forecasting."""
