"""Showroom attendance package.

Tracks employees' daily attendance as a state machine, applies the
business unit's penalty policy on checkout and leave, and reconciles
active penalties into a final salary. Organized by feature modules
(attendance, penalties, payroll) with a thin Flask controller layer over
service/repository layers.
"""

__version__ = "1.0.0"
