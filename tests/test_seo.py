from datetime import date

from viraweb.routes.seo import PUBLIC_PAGES, build_robots, build_sitemap


def test_sitemap_lists_every_public_page():
    xml = build_sitemap("https://clinic.example", lastmod=date(2026, 10, 19))

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert xml.count("<url>") == len(PUBLIC_PAGES)
    assert "<loc>https://clinic.example</loc>" in xml
    assert "<loc>https://clinic.example/pricing</loc>" in xml
    assert "<lastmod>2026-10-19</lastmod>" in xml
    assert xml.count("<priority>1.0</priority>") == 1
    assert xml.count("<changefreq>weekly</changefreq>") == len(PUBLIC_PAGES)


def test_robots_points_at_sitemap():
    assert build_robots("https://clinic.example") == (
        "User-agent: *\nAllow: /\n\nSitemap: https://clinic.example/sitemap.xml\n"
    )


def test_endpoints_are_public_and_cached(anonymous_client):
    sitemap = anonymous_client.get("/sitemap.xml")
    assert sitemap.status_code == 200
    assert sitemap.headers["content-type"].startswith("application/xml")
    assert sitemap.headers["cache-control"] == "public, max-age=3600"

    robots = anonymous_client.get("/robots.txt")
    assert robots.status_code == 200
    assert robots.text.startswith("User-agent: *")
    assert robots.headers["cache-control"] == "public, max-age=3600"
