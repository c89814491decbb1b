"""
Group activity schemas.
"""

from pydantic import BaseModel


class GroupDetectionResponse(BaseModel):
    """Summary of one detector run."""

    success: bool = True
    dry_run: bool = False
    activities_scanned: int = 0
    activities_located: int = 0
    groups: int = 0
    awarded: int = 0
    upgraded: int = 0
    unchanged: int = 0
    failed: int = 0
