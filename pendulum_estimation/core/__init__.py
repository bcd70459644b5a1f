"""Numeric core: model, simulator, estimator, observability and measurements."""
