class Config:
    SECRET_KEY = "your_secret_key"
    DEBUG = True  # Set to False in production
    LOG_LEVEL = "INFO"

    PROCESS_DURATION_SECONDS = 60  # Length of the discount countdown
    TICK_INTERVAL_SECONDS = 1.0

    # Leave PAYMENT_TYPES_URL unset to serve the built-in catalog
    PAYMENT_TYPES_URL = None
    PAYMENT_TYPES_TIMEOUT = 5  # seconds, HTTP provider only
    PAYMENT_TYPES_DELAY_SECONDS = 2.0  # simulated latency of the static catalog
