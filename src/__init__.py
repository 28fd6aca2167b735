"""
Temperature Time Series - exploratory analysis and forecasting

Modules:
- temperature: daily minimum temperature EDA, H2O AutoML and AutoARIMA
"""
