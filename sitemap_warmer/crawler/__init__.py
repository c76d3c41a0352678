"""sitemap_warmer.crawler: Резолвер sitemap, пул воркеров, повтор и пинг."""
