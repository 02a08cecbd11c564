"""
The models package contains all the models used on the server.

.. autoclasstree:: busroster.models
"""

from .payment import Payment
from .rider import Rider, EmergencyContact, MedicalNote
from .trip import Trip, TripRider, ActiveTrip
from .user import User
