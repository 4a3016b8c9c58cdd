from __future__ import annotations
from urllib.parse import urlsplit

PLATFORM_DOMAIN = "tiktok.com"
SHORT_LINK_HOSTS = frozenset({"vm.tiktok.com", "vt.tiktok.com"})


def _recognized_host(host: str) -> bool:
    return host == PLATFORM_DOMAIN or host.endswith("." + PLATFORM_DOMAIN)


def extract_video_id(url: str | None) -> str | None:
    """
    Pull the TikTok video id out of a submission URL, or None if the shape is unknown.

    Supported shapes:
      - https://www.tiktok.com/@user/video/7234567890123456789
      - https://vm.tiktok.com/ZMabc123/  (short link: the whole path is the id)

    Examples:
        >>> extract_video_id("https://www.tiktok.com/@someone/video/7234567890123456789?lang=en")
        '7234567890123456789'
        >>> extract_video_id("https://vm.tiktok.com/ZMabc123/")
        'ZMabc123'
        >>> extract_video_id("https://example.com/video/1") is None
        True
    """
    if not url:
        return None
    try:
        parts = urlsplit(url.strip())
        host = (parts.hostname or "").lower()
    except ValueError:
        return None
    if not host or not _recognized_host(host):
        return None

    segments = parts.path.split("/")
    if "video" in segments:
        idx = segments.index("video")
        if idx + 1 < len(segments) and segments[idx + 1]:
            return segments[idx + 1]

    if host in SHORT_LINK_HOSTS:
        vid = parts.path.replace("/", "")
        return vid or None

    return None
