from core.models import Platform
from scrapers.seeds import build_seeds


def test_platform_major_order():
    seeds = build_seeds(["reddit", "hackernews"], ["a", "b"])
    assert [(s.platform, s.keyword) for s in seeds] == [
        (Platform.REDDIT, "a"),
        (Platform.REDDIT, "b"),
        (Platform.HACKERNEWS, "a"),
        (Platform.HACKERNEWS, "b"),
    ]


def test_keyword_is_url_encoded():
    (seed,) = build_seeds(["hackernews"], ["artificial intelligence & co"])
    assert seed.url == (
        "https://hn.algolia.com/api/v1/search?query=artificial%20intelligence%20%26%20co"
        "&tags=story&hitsPerPage=50"
    )


def test_x_tag_maps_to_twitter():
    (seed,) = build_seeds(["x"], ["ai"])
    assert seed.platform is Platform.TWITTER
    assert seed.url == "https://twitter.com/search?q=ai&src=typed_query"


def test_unknown_platform_is_skipped():
    seeds = build_seeds(["myspace", "news"], ["ai"])
    assert len(seeds) == 1
    assert seeds[0].platform is Platform.NEWS
    assert seeds[0].url == "https://news.google.com/search?q=ai"


def test_defaults():
    seeds = build_seeds()
    assert len(seeds) == 1
    assert seeds[0].platform is Platform.TWITTER
    assert seeds[0].keyword == "artificial intelligence"
