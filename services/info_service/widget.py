"""
Embeddable "logo carousel" fragment shown next to the upsell offer.

Logos come from CAROUSEL_LOGOS as comma-separated "url|alt" pairs.
"""
from html import escape
from typing import List, Tuple

CAROUSEL_CSS = """
.gj-carousel{overflow:hidden;width:100%;padding:12px 0;background:#fff}
.gj-carousel__track{display:flex;gap:48px;align-items:center;width:max-content;animation:gj-scroll 40s linear infinite}
.gj-carousel:hover .gj-carousel__track{animation-play-state:paused}
.gj-carousel__logo{height:40px;width:auto;filter:grayscale(100%);opacity:.75;transition:filter .2s,opacity .2s}
.gj-carousel__logo:hover{filter:none;opacity:1}
@keyframes gj-scroll{from{transform:translateX(0)}to{transform:translateX(-50%)}}
@media (prefers-reduced-motion:reduce){.gj-carousel__track{animation:none}}
"""


def parse_logos(entries: List[str]) -> List[Tuple[str, str]]:
    logos = []
    for entry in entries:
        url, _, alt = entry.partition("|")
        url = url.strip()
        if url:
            logos.append((url, alt.strip()))
    return logos


def render_carousel(entries: List[str]) -> str:
    logos = parse_logos(entries)
    images = "".join(
        f'<img class="gj-carousel__logo" src="{escape(url)}" alt="{escape(alt)}" loading="lazy">'
        for url, alt in logos
    )
    # The track holds two copies so the -50% scroll loops seamlessly
    return (
        f"<style>{CAROUSEL_CSS}</style>"
        '<div class="gj-carousel" aria-label="Featured employers">'
        f'<div class="gj-carousel__track">{images}{images}</div>'
        "</div>"
    )
