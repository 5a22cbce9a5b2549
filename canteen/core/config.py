import os
from dotenv import load_dotenv

load_dotenv()

# Database Configuration
# Uses default credentials for local Docker Compose setup
DB_URL = os.getenv("DATABASE_URL", "postgres://user:password@db:5432/canteen_db")

# Application Metadata
PROJECT_NAME = "Employee Cafeteria Ordering API"
VERSION = "1.0.0"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Authentication
# No default secret: tokens cannot be issued or verified until one is configured.
JWT_SECRET = os.getenv("JWT_SECRET", "")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_TTL_DAYS = int(os.getenv("ACCESS_TOKEN_TTL_DAYS", 7))

# Razorpay (payment gateway)
RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID", "")
RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET", "")
RAZORPAY_API_BASE = os.getenv("RAZORPAY_API_BASE", "https://api.razorpay.com/v1")

# Timeouts (seconds) for storage and gateway calls
STORAGE_TIMEOUT = float(os.getenv("STORAGE_TIMEOUT", 5))
PAYMENT_GATEWAY_TIMEOUT = float(os.getenv("PAYMENT_GATEWAY_TIMEOUT", 10))

# Password reset
PASSWORD_RESET_URL = os.getenv("PASSWORD_RESET_URL", "http://localhost:4000/reset-password.html")
RESET_TOKEN_TTL_MINUTES = int(os.getenv("RESET_TOKEN_TTL_MINUTES", 60))
