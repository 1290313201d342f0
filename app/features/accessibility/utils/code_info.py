from typing import Any, Dict, Optional

from app.platform.config import Settings, settings as default_settings


class SettingsCodeInfoProvider:
    """
    Locates a site's code snapshot in the configured bucket.

    The snapshot itself is uploaded by the code import job; this only computes where
    it lives. Sites without repository coordinates, or deployments without a bucket,
    get None.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    async def get_code_info(self, site: Any, domain: str) -> Optional[Dict[str, Any]]:
        bucket = self.settings.CODE_SNAPSHOT_BUCKET
        code_config = getattr(site, "code_config", None) or {}
        if not bucket or not code_config:
            return None

        owner = code_config.get("owner")
        repo = code_config.get("repo")
        ref = code_config.get("ref") or "main"
        if not owner or not repo:
            return None

        return {
            "codeBucket": bucket,
            "codePath": f"code/{site.id}/{owner}/{repo}/{ref}/repository.zip",
        }
