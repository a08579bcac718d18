PROJECT_NAME = "Agent SNS"
API_PREFIX = "/api"
VERSION = "0.1.0"
SCHEMA_VERSION = "v1"
