class ResponseMessages:
    """Standard API response messages"""

    # Success messages
    SUCCESS = "Success"
    CREATED = "Created successfully"
    UPDATED = "Updated successfully"
    DELETED = "Deleted successfully"


# Application Constants
class AppConstants:
    # Pagination
    DEFAULT_PAGE = 1
    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100

    # Recurrence
    MAX_RECURRENCE_OCCURRENCES = 365

    # Validation Limits
    MAX_TITLE_LENGTH = 200
    MAX_DESCRIPTION_LENGTH = 5000
    MAX_LOCATION_LENGTH = 300
    MAX_NOTES_LENGTH = 1000
    MAX_HOURS_PER_ENTRY = 24.0

    # CORS
    DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]
