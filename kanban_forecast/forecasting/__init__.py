"""Monte Carlo forecasting of time till completion for a prioritized backlog.

This package provides:
- Domain types (throughput, input samples, projects, roadmaps, estimates)
- The single-trial depletion simulator and the Monte Carlo orchestrator
- The fixed-shape accumulator for per-trial, per-project estimates
- Run configuration (TOML) and the forecasting use case
"""
