from __future__ import annotations
from urllib.parse import urljoin, urlparse, urlunparse, parse_qsl, urlencode

TRACKING_PARAMS = {"utm_source","utm_medium","utm_campaign","utm_term","utm_content","ref","ref_src","gclid","fbclid"}

def normalize_url(base: str, href: str) -> str:
    """Resolve relative → absolute, drop fragments & tracking, normalize scheme/host.

    Handlers use this before enqueueing links pulled from a page. Path casing
    is kept (servers may be case sensitive); scheme and netloc are lowercased.
    """
    absu = urljoin(base, href.strip())
    u = urlparse(absu)
    u = u._replace(fragment="")
    q = [(k, v) for k, v in parse_qsl(u.query, keep_blank_values=False) if k.lower() not in TRACKING_PARAMS]
    u = u._replace(query=urlencode(q, doseq=True) if q else "")
    u = u._replace(scheme=u.scheme.lower(), netloc=u.netloc.lower())
    return urlunparse(u)
