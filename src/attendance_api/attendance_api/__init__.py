"""Attendance API package.

This package is organized by feature modules (users, attendance, reports)
with a thin Flask controller layer on top of service/repository layers.
"""
