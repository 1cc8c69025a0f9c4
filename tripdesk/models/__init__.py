# Models package
from .profile import Profile, ProfileRole
from .destination import Destination
from .booking import Booking, BookingStatus
from .transaction import Transaction, TransactionStatus, RefundStatus, REFUND_PAYMENT_METHOD
from .review import Review
