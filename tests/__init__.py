"""
Test suite for the Healthcare Appointment Booking service.

Covers the slot store, the booking coordinator and the HTTP endpoints.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
