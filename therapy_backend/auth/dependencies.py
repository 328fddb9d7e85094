from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWTError
from sqlalchemy.orm import Session

from therapy_backend.auth import jwt_handler
from therapy_backend.database import get_db
from therapy_backend.models.therapist import Therapist

security = HTTPBearer()


def get_current_therapist(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Therapist:
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except PyJWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    email = payload.get("sub")
    if not email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token subject")

    therapist = db.query(Therapist).filter(Therapist.email == email.strip().lower()).first()
    if therapist is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Therapist not found")
    return therapist
