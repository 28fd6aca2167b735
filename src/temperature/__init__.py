"""
Daily minimum temperature project (Melbourne, 1981-1990).

Modules:
- config: pipeline configuration and paths
- ingest: CSV load, type coercion, NA report and drop
- validate: daily time index integrity report
- diagnostics: anomaly (STL + IQR), seasonal and ACF/PACF tables
- features: time series signature augmentation and holdout split
- evaluation: accuracy metrics and error tables
- automl: H2O AutoML track
- arima: StatsForecast AutoARIMA track
- plots: plotly charts
- tasks: pipeline orchestration
- cli: Typer entry point
"""
