"""School attendance engine.

This package is organized by feature modules (attendance, alerts, students,
users) with a thin Flask controller layer over service/repository layers.
"""
