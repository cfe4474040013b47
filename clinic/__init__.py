"""Clinic application for the HMIS backend.

This package contains models, serializers, views and route registrations
for the hospital's administrative API: patients, clerking,
appointments, pharmacy, billing and the staff/facility directories.
"""
