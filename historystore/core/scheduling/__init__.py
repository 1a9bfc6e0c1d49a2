"""
Core Scheduling Module

Provides periodic task scheduling for automated maintenance operations.
"""
from .periodic_scheduler import PeriodicTaskScheduler

__all__ = ['PeriodicTaskScheduler']
