from .model import DashboardModel, DateRange, resolve_period

__all__ = ["DashboardModel", "DateRange", "resolve_period"]
