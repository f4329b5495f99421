"""
Healthcare Appointment Booking

A FastAPI-based backend where doctors publish availability slots and
patients book and cancel appointments against them.
"""

__version__ = "1.0.0"
