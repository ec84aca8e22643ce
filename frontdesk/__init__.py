"""Front-desk application for the clinic backend.

This package contains the models, services, serializers, views and
route registrations behind the front-desk API: staff sessions, patient
admissions, cash shifts and the dashboard cash reports.
"""
