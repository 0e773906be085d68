from .event import Event, MerchandiseVariant
from .registration import Registration, RegistrationItem

__all__ = [
    "Event",
    "MerchandiseVariant",
    "Registration",
    "RegistrationItem",
]
