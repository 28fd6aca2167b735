"""
Temperature Test Suite

Tests organized by module under tests/temperature/:
- test_ingest.py - CSV load, coercion and NA handling
- test_features.py - signature augmentation and holdout split
- test_diagnostics.py - anomaly, seasonal and ACF tables
- test_evaluation.py - accuracy metrics (NaN handling)
- test_arima.py - AutoARIMA calibration and forecast
- test_automl.py - H2O AutoML wrapper (cluster mocked)
- test_pipeline.py - end-to-end smoke run and CLI
"""
