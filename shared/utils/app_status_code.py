class AppStatusCode:
    # Success
    DATA_RETRIEVED_SUCCESSFULLY = "1000"
    CREATED_SUCCESSFULLY = "1001"
    UPDATED_SUCCESSFULLY = "1002"
    DELETED_SUCCESSFULLY = "1003"
    OPERATION_SUCCESSFUL = "1004"

    # Validation
    INVALID_INPUT = "2000"
    REQUIRED_VALIDATION_ERROR = "2001"
    INVALID_DATE_RANGE = "2002"
    INVALID_STATUS_TRANSITION = "2003"
    CAPACITY_EXCEEDED = "2004"

    # Authentication / authorization
    AUTHENTICATION_CREDENTIALS_INVALID = "3000"
    AUTHENTICATION_TOKEN_INVALID = "3001"
    AUTHENTICATION_TOKEN_EXPIRED = "3002"
    AUTHENTICATION_USER_INVALID = "3003"
    AUTHENTICATION_USER_INACTIVE = "3004"
    AUTHENTICATION_USER_NOT_VERIFIED = "3005"
    AUTHENTICATION_UNAUTHORIZED_ACCESS = "3006"
    UNAUTHORIZED_ACTION = "3007"
    ACCESS_OUTSIDE_ALLOWED_HOURS = "3008"

    # Data
    NOT_FOUND = "4000"
    DUPLICATE_ADD_ERROR = "4001"
    USER_USERNAME_IS_UNIQUE = "4002"
    RESOURCE_IN_USE = "4003"
    RESERVATION_CONFLICT = "4004"

    # Failures
    OPERATION_FAILED = "5000"
    OPERATION_ERROR = "5001"
    DATABASE_ERROR = "5002"
