"""
Program Insights: lifecycle and performance analytics for social-assistance
programs and their beneficiaries.
"""

__version__ = "0.1.0"
