from .statistics_plotter import StatisticsPlotter

__all__ = ["StatisticsPlotter"]
