"""
Print a long-lived bearer token for a user (development helper).

Usage:
    python create_token.py 1 asha@example.com asha
"""

import sys

from saveup_api.app.core.security import create_access_token
from saveup_api.app.schemas.auth import Principal

if len(sys.argv) != 4:
    print(__doc__.strip(), file=sys.stderr)
    sys.exit(1)

principal = Principal(user_id=int(sys.argv[1]), email=sys.argv[2], username=sys.argv[3])
# Valid for 365 days (seconds)
token = create_access_token(principal, expires_delta=365 * 24 * 60 * 60)
print(token)
