from __future__ import annotations


class ForecastingError(Exception):
    """Base type for all errors raised by the forecasting engine."""


class InvalidStateError(ForecastingError, RuntimeError):
    """Operation is not valid for the current state of the object."""


class IndeterminateThroughputError(ForecastingError, ArithmeticError):
    """Throughput arithmetic whose result is undefined (e.g. inf / inf)."""


class InputSamplesReadError(ForecastingError, ValueError):
    """Historical input samples could not be read."""
