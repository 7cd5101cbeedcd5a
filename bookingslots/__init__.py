"""
bookingslots - bookable time slots and day agendas for service providers.
"""

__version__ = "0.1.0"
