"""
Feedback history and analytics events.
"""
