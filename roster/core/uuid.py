"""
UUID creation for database identities. uuid7 is not part of the standard
library on the Python versions we support.
"""

from uuid import UUID as UUID

from uuid_extensions import uuid7 as uuid7

__ALL__ = ["UUID", "uuid7"]
