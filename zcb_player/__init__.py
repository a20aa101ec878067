"""ZCB Scenario Player.

Deployment and end-to-end testing tool for the zero-coupon-bond contracts.
"""

__version__ = "0.1.0"
