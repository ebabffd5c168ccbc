"""
Risk Thinker: rule-based security risk analysis of architecture models
"""

__version__ = "0.1.0"
