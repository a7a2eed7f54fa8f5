"""Practicum Attendance package.

Organized by feature modules (agencies, practicums, attendance, reports)
with a thin Flask controller layer over service/repository layers.
"""
