from django.dispatch import Signal

# Payload-less "the cart may have changed" broadcast. Receivers must re-fetch
# the whole cart rather than patch; delivery is at-least-once.
cart_changed = Signal()

# Sent by Session.login once a guest becomes an authenticated user.
session_authenticated = Signal()

# Sent by Session.logout when an authenticated user goes back to being a guest.
session_ended = Signal()


def notify_cart_changed(sender=None) -> None:
    cart_changed.send(sender=sender)
