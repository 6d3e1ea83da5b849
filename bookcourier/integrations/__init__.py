"""
Third-party integrations: error tracking and payments.
"""
