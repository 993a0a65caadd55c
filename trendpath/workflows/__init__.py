"""Workflows module."""
from .trend_path import TrendPathWorkflow, run_trend_path
from .spike_parallel import detect_spikes_parallel

__all__ = ['TrendPathWorkflow', 'run_trend_path', 'detect_spikes_parallel']
