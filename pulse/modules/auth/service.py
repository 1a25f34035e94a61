import base64
import hashlib
import hmac
import logging
import time
from datetime import datetime
from typing import Any, Dict, Optional

import httpx
from jose import jwt, JWTError
from supabase import Client

from pulse.config.settings import settings
from pulse.core import errors
from pulse.modules.onboarding.service import OnboardingService

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to avoid re-verifying the same token on bursts of parallel requests
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500

_JWKS_CACHE: Dict[str, Any] = {}
_JWKS_CACHE_TTL_SEC = 3600


def fetch_clerk_jwks() -> Dict[str, Any]:
    """Fetch Clerk's JWKS (cached for an hour)."""
    now = time.monotonic()
    cached = _JWKS_CACHE.get("jwks")
    if cached and now < cached[1]:
        return cached[0]
    headers = {}
    if settings.clerk_secret_key:
        headers["Authorization"] = f"Bearer {settings.clerk_secret_key}"
    response = httpx.get(settings.clerk_jwks_url, headers=headers, timeout=10.0)
    response.raise_for_status()
    jwks = response.json()
    _JWKS_CACHE["jwks"] = (jwks, now + _JWKS_CACHE_TTL_SEC)
    return jwks


def clear_auth_caches():
    _AUTH_USER_CACHE.clear()
    _JWKS_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def verify_token(self, token: str) -> Dict[str, Any]:
        """Verify a Clerk session JWT (RS256) and return its claims."""
        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            raise errors.unauthorized("Invalid JWT format")
        kid = header.get("kid")
        try:
            jwks = fetch_clerk_jwks()
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch Clerk JWKS: {e}")
            raise errors.unauthorized("Authentication failed")
        rsa_key = next((k for k in jwks.get("keys", []) if k.get("kid") == kid), None)
        if rsa_key is None:
            logger.warning(f"No matching JWKS key for kid={kid}")
            raise errors.unauthorized("Invalid token signature")
        try:
            return jwt.decode(
                token,
                rsa_key,
                algorithms=["RS256"],
                issuer=settings.clerk_issuer,
                options={"verify_aud": False},  # Clerk session tokens carry no audience
            )
        except JWTError as e:
            logger.warning(f"JWT validation failed: {e}")
            raise errors.unauthorized("Invalid or expired token")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from a Clerk token. Uses short TTL cache."""
        cache_key = hashlib.sha256(token.encode()).hexdigest()
        now = time.monotonic()
        if cache_key in _AUTH_USER_CACHE:
            user_data, expiry = _AUTH_USER_CACHE[cache_key]
            if now < expiry:
                return user_data
            del _AUTH_USER_CACHE[cache_key]
        claims = self.verify_token(token)
        user_id = claims.get("sub")
        if not user_id:
            raise errors.unauthorized("No sub claim in token")
        user_data = {
            "id": user_id,
            "session_id": claims.get("sid"),
            "email": claims.get("email"),
            "claims": claims,
        }
        # Never cache past the token's own expiry
        ttl = _AUTH_CACHE_TTL_SEC
        if claims.get("exp"):
            ttl = max(0, min(ttl, int(claims["exp"] - time.time())))
        if ttl and len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
            _AUTH_USER_CACHE[cache_key] = (user_data, now + ttl)
        return user_data


class ClerkClient:
    """Thin wrapper over the Clerk Backend API."""

    def __init__(self, secret_key: Optional[str] = None, base_url: Optional[str] = None):
        self.secret_key = secret_key or settings.clerk_secret_key
        self.base_url = (base_url or settings.clerk_api_url).rstrip("/")

    def get_user(self, user_id: str) -> Dict[str, Any]:
        if not self.secret_key:
            raise errors.ApiError(500, errors.UPSTREAM_ERROR, "CLERK_SECRET_KEY not configured")
        try:
            response = httpx.get(
                f"{self.base_url}/users/{user_id}",
                headers={"Authorization": f"Bearer {self.secret_key}"},
                timeout=10.0,
            )
        except httpx.HTTPError as e:
            raise errors.ApiError(502, errors.UPSTREAM_ERROR, f"Failed to fetch user from Clerk: {e}")
        if response.status_code == 404:
            raise errors.not_found("User not found in Clerk")
        if response.status_code >= 400:
            raise errors.ApiError(502, errors.UPSTREAM_ERROR, "Failed to fetch user from Clerk")
        return response.json()


def profile_from_clerk_user(clerk_user: Dict[str, Any]) -> Dict[str, Any]:
    """Map a Clerk user object (API or webhook payload) onto a profiles row."""
    primary_id = clerk_user.get("primary_email_address_id")
    email = next(
        (e.get("email_address") for e in clerk_user.get("email_addresses") or [] if e.get("id") == primary_id),
        None,
    )
    full_name = f"{clerk_user.get('first_name') or ''} {clerk_user.get('last_name') or ''}".strip() or None
    return {
        "id": clerk_user["id"],
        "email": email,
        "full_name": full_name,
        "avatar_url": clerk_user.get("image_url"),
        "updated_at": datetime.utcnow().isoformat(),
    }


def verify_svix_signature(payload: bytes, svix_id: str, svix_timestamp: str, svix_signature: str, secret: str) -> bool:
    """Verify a Svix-signed webhook body (HMAC-SHA256 over "{id}.{timestamp}.{body}")."""
    if secret.startswith("whsec_"):
        secret = secret[6:]
    try:
        secret_bytes = base64.b64decode(secret)
    except ValueError:
        logger.error("Clerk webhook secret is not valid base64")
        return False
    signed_payload = f"{svix_id}.{svix_timestamp}.".encode("utf-8") + payload
    expected = base64.b64encode(
        hmac.new(secret_bytes, signed_payload, hashlib.sha256).digest()
    ).decode("utf-8")
    # Header format: "v1,<sig1> v1,<sig2> ..."
    for sig in svix_signature.split(" "):
        if sig.startswith("v1,") and hmac.compare_digest(expected, sig[3:]):
            return True
    return False


def svix_timestamp_error(svix_timestamp: str, now: Optional[float] = None,
                         tolerance: Optional[int] = None) -> Optional[str]:
    """Reason a Svix timestamp is unacceptable (unparseable or outside the replay window), else None."""
    tolerance = settings.clerk_webhook_tolerance_seconds if tolerance is None else tolerance
    try:
        sent_at = int(svix_timestamp)
    except (TypeError, ValueError):
        return "Invalid webhook timestamp"
    age = abs(int(now if now is not None else time.time()) - sent_at)
    if age > tolerance:
        return f"Webhook timestamp outside tolerance ({age}s)"
    return None


class ProfileSyncService:
    def __init__(self, supabase: Client, clerk: Optional[ClerkClient] = None):
        self.supabase = supabase
        self.clerk = clerk or ClerkClient()

    def upsert_profile(self, profile: Dict[str, Any]) -> None:
        try:
            self.supabase.table("profiles")\
                .upsert(profile, on_conflict="id")\
                .execute()
        except Exception as e:
            logger.error(f"Profile upsert error for {profile.get('id')}: {e}")
            raise errors.ApiError(500, errors.PERSISTENCE_FAILED, f"Failed to sync profile: {e}")

    def bootstrap_onboarding(self, user_id: str) -> None:
        """Create the onboarding row when absent. Failures are logged, never raised."""
        try:
            OnboardingService(self.supabase).ensure_progress_row(user_id)
        except Exception as e:
            logger.warning(f"Onboarding bootstrap skipped for {user_id}: {e}")

    def sync_from_clerk(self, user_id: str) -> Dict[str, Any]:
        """Idempotent profile sync run on every sign-in."""
        clerk_user = self.clerk.get_user(user_id)
        profile = profile_from_clerk_user({**clerk_user, "id": user_id})
        logger.info(f"Syncing profile for {user_id} ({profile['email']})")
        self.upsert_profile(profile)
        self.bootstrap_onboarding(user_id)
        return {"success": True, "user_id": user_id, "email": profile["email"]}

    def handle_webhook_event(self, event_type: str, data: Dict[str, Any]) -> None:
        if event_type in ("user.created", "user.updated"):
            self.upsert_profile(profile_from_clerk_user(data))
            if event_type == "user.created":
                self.bootstrap_onboarding(data["id"])
            logger.info(f"Synced user {data['id']} from {event_type}")
        elif event_type == "user.deleted":
            logger.info(f"Ignoring user.deleted for {data.get('id')}: profiles are retained")
        else:
            logger.debug(f"Unhandled Clerk webhook event {event_type}")
