from fastapi import APIRouter, Depends
from agroshop.db.changes import feed
from agroshop.models.user import User
from agroshop.auth.security import get_current_active_user

router = APIRouter()

@router.get("/")
def read_change_versions(current_user: User = Depends(get_current_active_user)):
    """Per-table counters, bumped on every committed write.

    A client keeps the last versions it saw and re-fetches the views backed by
    any table whose counter moved.
    """
    return {"versions": feed.versions()}
