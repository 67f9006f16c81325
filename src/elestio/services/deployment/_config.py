"""
Configuration constants for deployment polling.
"""

# Delay between status checks once the service is visible
DEFAULT_POLL_INTERVAL = 15.0  # seconds

# Delay before looking again when the service is not listed yet
DEFAULT_NOT_FOUND_INTERVAL = 10.0  # seconds

# Give up waiting after this long
DEFAULT_DEPLOY_TIMEOUT = 600.0  # 10 minutes

# Terminal state: both fields must match
DEPLOYED_STATUS = "Deployed"
RUNNING_STATE = "running"

# Identifier fields a service can be matched on
ID_FIELDS = ("vmID", "providerServerID")
