import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Config:
    # Azure CosmosDB Configuration
    COSMOSDB_ENDPOINT = os.getenv("COSMOS_DB_ENDPOINT")
    COSMOSDB_DATABASE_NAME = os.getenv("COSMOS_DB_DATABASE")
    COSMOSDB_CONTAINER_NAME = {
        "users": os.getenv("COSMOS_CONTAINERS_USERS", "users"),
        "availabilities": os.getenv("COSMOS_CONTAINERS_AVAILABILITIES", "availabilities"),
        "exceptions": os.getenv("COSMOS_CONTAINERS_EXCEPTIONS", "availability_exceptions"),
        "classes": os.getenv("COSMOS_CONTAINERS_CLASSES", "classes"),
        "sessions": os.getenv("COSMOS_CONTAINERS_SESSIONS", "sessions")
    }

    # JWT Configuration
    JWT_SECRET_KEY = os.getenv("AUTH_SECRET_KEY")
    JWT_ALGORITHM = os.getenv("AUTH_ALGORITHM", "HS256")

    # Application Insights
    APPLICATIONINSIGHTS_CONNECTION_STRING = os.getenv("APPINSIGHTS_INSTRUMENTATIONKEY")

    # Wall-clock zone that session timestamps are read in. Unset keeps each
    # timestamp's own offset.
    SCHOOL_TIMEZONE = os.getenv("SCHOOL_TIMEZONE")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
