import os

APP_DIR = os.path.dirname(os.path.abspath(__file__))
CONFIG_DIR = os.path.join(APP_DIR, 'config')
DB_FILE = os.path.join(CONFIG_DIR, 'portal.db')
CONFIG_FILE = os.path.join(CONFIG_DIR, 'settings.yaml')
MIGRATIONS_DIR = os.path.join(APP_DIR, 'migrations')
ALEMBIC_CONF = os.path.join(MIGRATIONS_DIR, 'alembic.ini')

PORTAL_DB = os.environ.get('PORTAL_DB', 'sqlite:///' + DB_FILE)

BUILD_VERSION = '20261019_1200'

# Session action types
ACTION_VISIT = 'visit'
ACTION_VERIFY = 'verify'

# Verification methods
VERIFICATION_PHONE = 'phone'
VERIFICATION_ID = 'id'
VERIFICATION_TYPES = (VERIFICATION_PHONE, VERIFICATION_ID)

# Audit event types
EVENT_VISIT = 'visit'
EVENT_CODE_ISSUED = 'code_issued'
EVENT_VERIFIED = 'verified'
EVENT_VERIFICATION_FAILED = 'verification_failed'
EVENT_CONTACT_UPDATED = 'contact_updated'

# Phone verification code
CODE_TTL_SECONDS = 60
CODE_MIN = 1000
CODE_MAX = 9999

# Contact fields accepted by the update endpoint: payload key -> column suffix
CONTACT_FIELDS = {
    'address': 'address',
    'homePhone': 'home_phone',
    'mobilePhone': 'mobile_phone',
}

ADDRESS_MAX_LENGTH = 200
PHONE_MAX_LENGTH = 20

DEFAULT_SETTINGS = {
    "portal": {
        "test_mode": False,
    },
    "verification": {
        "resend_cooldown_seconds": 60,
    },
    "cooldown": {
        "backend": "memory",
        "redis_url": "redis://localhost:6379/0",
    },
    "sms": {
        "api_url": "https://new.e8d.tw/API21/HTTP/SendSMS.ashx",
        "uid": "",
        "pwd": "",
        "timeout_seconds": 10,
        "subject": "Shareholder verification code",
        "message_template": "Dear shareholder, your verification code is {code}. Please verify within 1 minute.",
    },
}
