"""Settings for the registration and fulfillment engine."""

from decouple import config

# Ticket identifiers look like TKT-1A2B3C4D.
TICKET_ID_PREFIX = config("TICKET_ID_PREFIX", default="TKT-")
TICKET_ID_BYTES = config("TICKET_ID_BYTES", default=4, cast=int)
TICKET_ID_MAX_ATTEMPTS = config("TICKET_ID_MAX_ATTEMPTS", default=5, cast=int)

# close() retries when the lifecycle sweep moves the event underneath it.
LIFECYCLE_CAS_MAX_ATTEMPTS = config("LIFECYCLE_CAS_MAX_ATTEMPTS", default=3, cast=int)
LIFECYCLE_SWEEP_INTERVAL_SECONDS = config("LIFECYCLE_SWEEP_INTERVAL_SECONDS", default=60, cast=int)

OUTBOX_REDISPATCH_AFTER_MINUTES = config("OUTBOX_REDISPATCH_AFTER_MINUTES", default=5, cast=int)
OUTBOX_MAX_ATTEMPTS = config("OUTBOX_MAX_ATTEMPTS", default=10, cast=int)
OUTBOX_REDISPATCH_INTERVAL_SECONDS = config("OUTBOX_REDISPATCH_INTERVAL_SECONDS", default=300, cast=int)

FRONTEND_BASE_URL = config("FRONTEND_BASE_URL", default="http://localhost:3000")

# Participants signing up as IIIT must use an address on this domain.
IIIT_EMAIL_DOMAIN = config("IIIT_EMAIL_DOMAIN", default="iiit.ac.in")
