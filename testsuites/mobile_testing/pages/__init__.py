"""
Page Objects for the MealMommy mobile app.
"""

from .customer_home_page import CustomerHomePage
from .driver_home_page import DriverHomePage
from .login_page import LoginPage

__all__ = [
    "CustomerHomePage",
    "DriverHomePage",
    "LoginPage",
]
