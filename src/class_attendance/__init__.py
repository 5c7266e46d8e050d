"""Class attendance package.

Organized by feature modules (geofence, face, verification, attendance,
reports, ...) with a thin Flask controller layer on top of service and
repository layers.
"""
