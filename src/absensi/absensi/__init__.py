"""Absensi package.

Organized by feature modules (organization, access, meetings, attendance, ...)
with a thin Flask controller layer over service/repository layers.
"""
