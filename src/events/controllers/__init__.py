from .organizer import OrganizerController
from .registrations import RegistrationController

__all__ = ["OrganizerController", "RegistrationController"]
