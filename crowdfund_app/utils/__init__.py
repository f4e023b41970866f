"""
Utility functions module.

Time Semantics:
- Product deadlines and milestone target dates are integer UTC seconds
- The engine reads the clock once per call and uses that snapshot throughout
- Wall-clock conversion is only used for display and the system clock
"""
