"""Import all models so Base.metadata knows about every table."""
from eventhub.models.user import User, UserRole                          # noqa: F401
from eventhub.models.event import Event, EventType, Visibility          # noqa: F401
from eventhub.models.guest import EventGuest, GuestRSVP, GuestSource    # noqa: F401
from eventhub.models.toggle import EventToggle, ToggleField             # noqa: F401
from eventhub.models.reservation import Reservation, ReservationStatus  # noqa: F401
from eventhub.models.notification import Notification, NotificationType  # noqa: F401
