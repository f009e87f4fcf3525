"""
Public SEO endpoints: sitemap.xml and robots.txt for the marketing site
"""

from datetime import date
from typing import Optional
from xml.sax.saxutils import escape

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, Response

from ..config import SITE_URL

router = APIRouter(tags=["SEO"])

PUBLIC_PAGES = [
    "/",
    "/pricing",
    "/login",
    "/signup",
    "/forgot-password",
    "/gestor-de-clinica",
    "/gestor-de-consultorio",
    "/gestor-de-clientes",
    "/gestor-de-empresa",
]

CACHE_HEADERS = {"Cache-Control": "public, max-age=3600"}


def build_sitemap(site_url: str = SITE_URL, lastmod: Optional[date] = None) -> str:
    lastmod = (lastmod or date.today()).isoformat()
    entries = []
    for path in PUBLIC_PAGES:
        priority = "1.0" if path == "/" else "0.8"
        loc = site_url if path == "/" else f"{site_url}{path}"
        entries.append(
            "  <url>\n"
            f"    <loc>{escape(loc)}</loc>\n"
            f"    <lastmod>{lastmod}</lastmod>\n"
            "    <changefreq>weekly</changefreq>\n"
            f"    <priority>{priority}</priority>\n"
            "  </url>"
        )
    body = "\n".join(entries)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        f"{body}\n"
        "</urlset>\n"
    )


def build_robots(site_url: str = SITE_URL) -> str:
    return f"User-agent: *\nAllow: /\n\nSitemap: {site_url}/sitemap.xml\n"


@router.get("/sitemap.xml")
async def sitemap():
    return Response(content=build_sitemap(), media_type="application/xml", headers=CACHE_HEADERS)


@router.get("/robots.txt", response_class=PlainTextResponse)
async def robots():
    return PlainTextResponse(build_robots(), headers=CACHE_HEADERS)
