# JWT Configuration
JWT_ALGORITHM = "HS256"

# Generation request limits
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 2000

# Community key limits
MAX_API_KEY_LENGTH = 512
