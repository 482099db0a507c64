from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from dreamcatcher.security.tokens import TokenService, get_admin_token_service, get_client_token_service

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class ClientPrincipal:
    client_code: str


@dataclass(frozen=True)
class AdminPrincipal:
    id: int
    email: str


def _forbidden() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired token")


def _resolve_claims(
    creds: Optional[HTTPAuthorizationCredentials],
    token_service: TokenService,
) -> Dict[str, Any]:
    token = None
    if creds and creds.scheme.lower() == "bearer":
        token = creds.credentials

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    claims = token_service.verify(token)
    if claims is None:
        raise _forbidden()
    return claims


def require_client(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    token_service: TokenService = Depends(get_client_token_service),
) -> ClientPrincipal:
    claims = _resolve_claims(creds, token_service)
    client_code = claims.get("sub")
    if not isinstance(client_code, str) or not client_code:
        raise _forbidden()

    principal = ClientPrincipal(client_code=client_code)
    request.state.client = principal
    return principal


def require_admin(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    token_service: TokenService = Depends(get_admin_token_service),
) -> AdminPrincipal:
    claims = _resolve_claims(creds, token_service)
    try:
        principal = AdminPrincipal(id=int(claims["sub"]), email=str(claims["email"]))
    except (KeyError, TypeError, ValueError):
        raise _forbidden() from None

    request.state.admin = principal
    return principal
