from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from jose.exceptions import ExpiredSignatureError
from backend.models.mod_auth import AuthUser, UserRole, TokenData
from backend.configuration.config import Config

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")

def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

def verify_token(token: str) -> TokenData:
    """
    Verify the JWT token and extract its claims.
    Raises HTTPException if token is invalid.
    """
    if not Config.JWT_SECRET_KEY:
        raise _credentials_exception("Authentication is not configured")
    try:
        payload = jwt.decode(
            token,
            Config.JWT_SECRET_KEY,
            algorithms=[Config.JWT_ALGORITHM]
        )
        token_data = TokenData(
            id=payload.get("sub"),
            email=payload.get("email"),
            name=payload.get("name"),
            role=payload.get("role", UserRole.STUDENT),
            exp=payload.get("exp")
        )
    except ExpiredSignatureError:
        raise _credentials_exception("Token has expired")
    except (JWTError, ValueError):
        raise _credentials_exception()
    return token_data

def get_current_user(token: str = Depends(oauth2_scheme)) -> AuthUser:
    """
    Get the current authenticated user from the token.
    This is the main dependency to be used in protected endpoints.
    """
    token_data = verify_token(token)
    return AuthUser(
        id=token_data.id,
        email=token_data.email,
        name=token_data.name,
        role=token_data.role
    )

def get_current_teacher(current_user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """Dependency for endpoints that require teacher access"""
    if current_user.role not in [UserRole.TEACHER, UserRole.ADMIN]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to perform this action"
        )
    return current_user
