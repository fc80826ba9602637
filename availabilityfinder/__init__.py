"""
availabilityfinder - compute common bookable time from weekly working hours,
date overrides and busy times.
"""

__version__ = "0.1.0"
