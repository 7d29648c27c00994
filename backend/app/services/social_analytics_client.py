import httpx
import time
import logging
from typing import Optional, Dict, Any, List
from urllib.parse import urlparse

from app.config import Settings, get_settings
from app.core.exceptions import (
    ConfigurationError,
    InvalidIdentifierError,
    MalformedProfileError,
    PlatformMismatchError,
    ProfileNotFoundError,
    SocialAnalyticsAPIError,
    UnsupportedPlatformError,
)
from app.schemas.social import Platform, PlatformAnalytics
from app.services.social_normalizer import (
    PLATFORM_LABELS,
    SOCIAL_TYPE_NAMES,
    detect_social_type,
    is_expected_social_type,
    normalize_profile,
)

# Configure logger for social analytics API calls
logger = logging.getLogger(__name__)


class SocialAnalyticsClient:
    """Client for the RapidAPI social statistics provider.

    Instagram and Twitter go through the shared ``/community`` lookup, which
    takes an undocumented ``cid`` identifier. We try a fixed list of formats
    in order and keep the first one that returns the right platform's data.
    """

    COMMUNITY_PATH = "/community"
    TIKTOK_INFO_PATH = "/tiktok/info"

    # Hosts recognised in scheme-less profile URLs ("instagram.com/jane")
    SOCIAL_HOSTS = ("instagram.com", "tiktok.com", "twitter.com", "x.com", "facebook.com")

    # Candidate cid formats, simplest first. Order is part of the contract.
    CANDIDATE_TEMPLATES: Dict[Platform, tuple] = {
        Platform.INSTAGRAM: (
            "{username}",
            "IG:{username}",
            "instagram.com/{username}",
            "https://instagram.com/{username}",
            "https://www.instagram.com/{username}",
            "https://www.instagram.com/{username}/",
            "INST:{username}",
        ),
        Platform.TWITTER: (
            "{username}",
            "TW:{username}",
            "twitter.com/{username}",
            "https://twitter.com/{username}",
            "https://x.com/{username}",
            "https://twitter.com/{username}/",
        ),
    }

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.api_key = self.settings.rapidapi_key
        self.host = self.settings.rapidapi_host
        self.base_url = f"https://{self.host}"
        self.timeout = self.settings.social_api_timeout_seconds
        self.headers = {
            "X-RapidAPI-Key": self.api_key,
            "X-RapidAPI-Host": self.host,
            "Accept": "application/json",
        }
        logger.info(f"Social analytics client initialized for host: {self.host}")

    @staticmethod
    def extract_username(identifier: str) -> str:
        """
        Reduce a handle or profile URL to a bare username.

        "https://www.instagram.com/jane.doe/?hl=en" -> "jane.doe"
        "https://tiktok.com/@jane"                  -> "jane"
        "@jane"                                     -> "jane"
        """
        cleaned = (identifier or "").strip()
        if "://" in cleaned:
            path = urlparse(cleaned).path
        elif "/" in cleaned and SocialAnalyticsClient._is_social_host(cleaned.split("/", 1)[0]):
            path = cleaned.split("/", 1)[1]
        else:
            path = cleaned
        path = path.split("?", 1)[0].split("#", 1)[0]

        segments = [segment for segment in path.split("/") if segment]
        username = segments[0].lstrip("@") if segments else ""
        if not username:
            raise InvalidIdentifierError(
                f"Could not extract a username from '{identifier}'. "
                "Provide a handle or a full profile URL."
            )
        return username

    @classmethod
    def _is_social_host(cls, host: str) -> bool:
        host = host.lower()
        for prefix in ("www.", "m.", "mobile."):
            if host.startswith(prefix):
                host = host[len(prefix):]
                break
        return host in cls.SOCIAL_HOSTS

    @classmethod
    def candidate_identifiers(cls, username: str, platform: Platform) -> List[str]:
        templates = cls.CANDIDATE_TEMPLATES.get(Platform(platform), ())
        return [template.format(username=username) for template in templates]

    def _require_api_key(self) -> None:
        if not self.api_key:
            raise ConfigurationError(
                "RAPIDAPI_KEY is not set. Configure it before verifying social profiles."
            )

    async def fetch_profile(self, identifier: str, platform: Platform) -> PlatformAnalytics:
        """
        Fetch and normalize a public profile.

        Candidates are tried one at a time to save provider quota. A 404 moves on
        to the next candidate; any other HTTP, timeout or transport error aborts
        the lookup at once.
        """
        self._require_api_key()
        platform = Platform(platform)
        username = self.extract_username(identifier)

        if platform in self.CANDIDATE_TEMPLATES:
            return await self._fetch_community_profile(username, platform)
        if platform == Platform.TIKTOK:
            return await self._fetch_tiktok_profile(username)
        raise UnsupportedPlatformError(platform.value)

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        """
        GET a JSON document. Returns None on 404 so callers can move on;
        every other failure raises SocialAnalyticsAPIError.
        """
        start_time = time.time()
        try:
            response = await client.get(
                url,
                params=params,
                headers=self.headers,
                timeout=self.timeout
            )
        except httpx.TimeoutException:
            logger.error(f"Social API timeout after {self.timeout}s: url={url} params={params}")
            raise SocialAnalyticsAPIError("Request timed out", None, is_timeout=True)
        except httpx.RequestError as e:
            logger.error(f"Social API request error: {type(e).__name__}: {str(e)}")
            raise SocialAnalyticsAPIError(f"Request failed: {str(e)}", None)

        response_time_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Social API response: status={response.status_code} | time={response_time_ms}ms")

        if response.status_code == 404:
            return None

        if response.status_code != 200:
            logger.error(
                f"Social API request failed: status={response.status_code} | body={response.text[:500]}"
            )
            raise SocialAnalyticsAPIError(
                f"API returned error {response.status_code}: {response.text[:200] or 'No details available'}",
                response.text,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            raise MalformedProfileError("Invalid API response: body is not JSON")
        if not isinstance(data, dict):
            raise MalformedProfileError("Invalid API response: expected a JSON object")
        return data

    async def _fetch_community_profile(self, username: str, platform: Platform) -> PlatformAnalytics:
        label = PLATFORM_LABELS[platform]
        url = f"{self.base_url}{self.COMMUNITY_PATH}"
        candidates = self.candidate_identifiers(username, platform)
        mismatched_type: Optional[str] = None

        # Sequential on purpose: the first hit wins and each call costs quota
        async with httpx.AsyncClient() as client:
            for attempt, cid in enumerate(candidates, start=1):
                logger.info(f"{label} lookup attempt {attempt}/{len(candidates)}: cid='{cid}'")
                payload = await self._get_json(client, url, {"cid": cid})

                if payload is None:
                    logger.info(f"{label} lookup: 404 for cid='{cid}', trying next format")
                    continue

                meta = payload.get("meta")
                if isinstance(meta, dict) and meta.get("code") not in (None, 200):
                    if meta.get("code") == 404:
                        continue
                    raise SocialAnalyticsAPIError(
                        f"API returned error: {meta.get('message') or 'Unknown error'}",
                        str(meta),
                        status_code=meta.get("code") if isinstance(meta.get("code"), int) else None,
                    )

                if payload.get("data") is None and "usersCount" not in payload:
                    logger.warning(f"{label} lookup: unrecognized payload for cid='{cid}', trying next format")
                    continue

                social_type = detect_social_type(payload)
                if not is_expected_social_type(social_type, platform):
                    logger.warning(
                        f"{label} lookup: got {social_type} instead of {label} for cid='{cid}', "
                        "trying next format"
                    )
                    mismatched_type = social_type
                    continue

                logger.info(f"{label} lookup: found profile for '{username}' with cid='{cid}'")
                return normalize_profile(payload, platform, username)

        logger.error(f"{label} lookup: all {len(candidates)} cid formats failed for '{username}'")
        if mismatched_type:
            found_on = SOCIAL_TYPE_NAMES.get(mismatched_type, mismatched_type)
            raise PlatformMismatchError(
                f"The account '{username}' was found on {found_on}, not {label}. "
                f"Please provide a {label} username.",
                found_type=mismatched_type,
            )
        raise ProfileNotFoundError(
            f"Unable to find {label} profile for '{username}'. Please verify the username "
            "is correct and the account exists. If the account is private, it may not be "
            "accessible via the API.",
            username=username,
        )

    async def _fetch_tiktok_profile(self, username: str) -> PlatformAnalytics:
        url = f"{self.base_url}{self.TIKTOK_INFO_PATH}"
        logger.info(f"TikTok lookup: GET {url} | username={username}")

        async with httpx.AsyncClient() as client:
            payload = await self._get_json(client, url, {"username": username})

        if payload is None:
            raise ProfileNotFoundError(
                f"Unable to find TikTok profile for '{username}'. Please verify the username "
                "is correct and the account is public.",
                username=username,
            )
        return normalize_profile(payload, Platform.TIKTOK, username)
